"""Rule catalog for React components and the JavaScript/TypeScript around them.

Predicates see one line and bounded neighbour windows only; nothing here parses
JSX, so treat every rule as a hint for the reviewer.
"""

from __future__ import annotations

import re

from review_scanner.models import ERROR, INFO, WARNING
from review_scanner.scanners.catalog import CommentPolicy, LineContext, RuleCatalog, rule


REACT_THRESHOLDS = {
    "max_line_length": 100,
    "key_prop_window": 2,
    "key_attr_window": 4,
    "import_window": 200,
    "promise_catch_window": 5,
    "effect_deps_window": 5,
    "listener_effect_window": 5,
    "listener_cleanup_window": 8,
    "img_tag_window": 3,
    "error_boundary_window": 10,
    "state_hooks_window": 20,
    "state_hook_count": 3,
    "seo_head_window": 200,
    "unused_import_window": 200,
}

REACT_COMMENT_POLICY = CommentPolicy(
    doc_label="JSDoc",
    doc_tags=("@param", "@returns", "@return", "@throws"),
    min_doc_length=100,
)

LISTENER_CLEANUP = {
    "addEventListener": "removeEventListener",
    "setInterval": "clearInterval",
    "subscribe": "unsubscribe",
}

HEAVY_LIBRARIES = ("moment", "lodash", "underscore", "jquery")

STRING_LITERAL_RE = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'|`(?:\\.|[^`\\])*`')
CONSOLE_LOG_RE = re.compile(r"\bconsole\.log\s*\(")
CONSOLE_OUTPUT_RE = re.compile(r"\bconsole\.(?:warn|error)\s*\(")
MAP_CALL_RE = re.compile(r"\.map\s*\(")
JSX_TAG_RE = re.compile(r"<[A-Za-z]")
KEY_PROP_RE = re.compile(r"\bkey=")
STATE_ASSIGN_RE = re.compile(r"\b(?:this\.)?state(?:\.\w+)+\s*=(?!=)")
HOOK_CALL_RE = re.compile(r"(?<![\w.])(?P<hook>use(?:State|Effect|Memo|Callback|Reducer|Context|Ref|LayoutEffect))\s*\(")
IMPORT_LINE_RE = re.compile(r"^\s*import\b")
IMPORT_OPEN_RE = re.compile(r"^\s*import\b[^'\"]*\{[^}]*$")
EFFECT_RE = re.compile(r"\buseEffect\s*\(")
EMPTY_DEPS_RE = re.compile(r",\s*\[\s*\]\s*\)")
INLINE_HANDLER_RE = re.compile(r"\bon[A-Z]\w*=\{\s*(?:async\s*)?(?:\([^)]*\)|\w+)\s*=>")
EXPORTED_COMPONENT_RE = re.compile(r"\bexport\s+(?:default\s+)?function\s+[A-Z]\w*\s*\((?P<params>[^)]*)\)")
THEN_RE = re.compile(r"\.then\s*\(")
CATCH_RE = re.compile(r"\.catch\s*\(")
VAR_RE = re.compile(r"(?<![\w.$])var\s+[\w$]")
SECRET_RE = re.compile(
    r"(?:password|passwd|secret|token|api[_-]?key)\s*[=:]\s*[\"'`][^\"'`]+",
    re.IGNORECASE,
)
DEPS_ARRAY_RE = re.compile(r",\s*\[")
EFFECT_CLOSE_RE = re.compile(r"^\s*\}\s*(?P<deps>,\s*\[[^\]]*\])?\s*\)")
LISTENER_RE = re.compile(r"\b(?P<api>addEventListener|setInterval|subscribe)\s*\(")
PROP_DRILLING_RE = re.compile(r"\bprops\.\w+\.\w")
LIBRARY_IMPORT_RE = re.compile(
    r"^\s*import\b.*?\bfrom\s+['\"](?P<lib>moment|lodash|underscore|jquery)['\"]"
    r"|\brequire\s*\(\s*['\"](?P<req>moment|lodash|underscore|jquery)['\"]\s*\)"
)
CLICKABLE_ELEMENT_RE = re.compile(r"<(?:div|span|li|img)\b[^>]*\bonClick=")
ARIA_RE = re.compile(r"\brole=|\baria-")
IMG_TAG_RE = re.compile(r"<img\b")
ALT_RE = re.compile(r"\balt=")
HANDLER_DECL_RE = re.compile(
    r"^\s*const\s+(?P<name>handle\w+|on[A-Z]\w*)\s*=\s*(?:async\s+)?(?:\([^)]*\)\s*=>|\w+\s*=>|function\b)"
)
DERIVED_DATA_RE = re.compile(r"^\s*const\s+\w+\s*=\s*[\w.]+\.(?:filter|sort|reduce)\s*\(")
SCOPED_SIDE_EFFECT_IMPORT_RE = re.compile(r"^\s*import\s+['\"]@")
TRY_BLOCK_RE = re.compile(r"\btry\s*\{")
ERROR_BOUNDARY_RE = re.compile(r"\bErrorBoundary\b")
EXPORTED_NAME_RE = re.compile(
    r"\bexport\s+(?:default\s+)?(?:function\s+(?P<func>\w+)|const\s+(?P<const>\w+)\s*=)"
)
USE_STATE_RE = re.compile(r"\buseState\s*\(")
STATE_HOOK_RE = re.compile(r"\buse(?:State|Reducer|Context)\s*\(")
INLINE_STYLE_RE = re.compile(r"\bstyle=\{\{")
EXPORT_DEFAULT_RE = re.compile(r"^\s*export\s+default\b")
SEO_HEAD_RE = re.compile(r"\bHead\b|\buseHead\b|<title\b|\bmetadata\b|\bHelmet\b")
IMPORT_CLAUSE_RE = re.compile(r"^\s*import\s+(?!type\b)(?P<clause>.+?)\s+from\s+['\"][^'\"]+['\"]")
NAMED_IMPORTS_RE = re.compile(r"\{(?P<names>[^}]*)\}")
NAMESPACE_IMPORT_RE = re.compile(r"\*\s+as\s+(?P<name>[\w$]+)")


def _code(text: str) -> str:
    return STRING_LITERAL_RE.sub('""', text)


def _is_comment(ctx: LineContext) -> bool:
    return ctx.stripped.startswith(("//", "*"))


def _any(pattern: re.Pattern[str], lines) -> bool:
    return any(pattern.search(line) for line in lines)


def _indent(text: str) -> str:
    return text[: len(text) - len(text.lstrip())]


@rule(
    "CONSOLE_LOG",
    WARNING,
    "quality",
    "Remove console.log before production",
    "Use a proper logging service",
)
def console_log(ctx: LineContext) -> bool:
    return not _is_comment(ctx) and bool(CONSOLE_LOG_RE.search(ctx.text))


@rule(
    "CONSOLE_OUTPUT",
    INFO,
    "quality",
    "Console output detected",
    "Consider using a logging service",
)
def console_output(ctx: LineContext) -> bool:
    return not _is_comment(ctx) and bool(CONSOLE_OUTPUT_RE.search(ctx.text))


@rule(
    "MISSING_KEY_PROP",
    ERROR,
    "quality",
    "Missing key prop in list rendering",
    "Add a unique key prop to each item: key={item.id}",
)
def missing_key_prop(ctx: LineContext) -> bool:
    """List render call whose element, on this line or within ``key_prop_window`` lines, has no key."""
    match = MAP_CALL_RE.search(ctx.text)
    if not match:
        return False
    tail = ctx.text[match.end():]
    tag = JSX_TAG_RE.search(tail)
    if tag:
        attrs = ctx.window.leading(ctx.index, ctx.limit("key_attr_window"))
        return _tag_has_key((tail[tag.start():], *attrs)) is False
    if not tail.rstrip().endswith(("(", "=>", "{")):
        return False
    for offset, line in enumerate(ctx.after("key_prop_window"), start=1):
        tag = JSX_TAG_RE.search(line)
        if tag:
            attrs = ctx.window.leading(ctx.index + offset, ctx.limit("key_attr_window"))
            return _tag_has_key((line[tag.start():], *attrs)) is False
    return False


def _tag_has_key(segments) -> bool | None:
    """Whether an opening tag spread over ``segments`` carries a key; None if it never closes."""
    for segment in segments:
        if KEY_PROP_RE.search(segment):
            return True
        if ">" in segment.replace("=>", ""):
            return False
    return None


@rule(
    "DIRECT_STATE_MUTATION",
    ERROR,
    "quality",
    "Direct state mutation detected",
    "Use setState or the state setter from useState",
)
def direct_state_mutation(ctx: LineContext) -> bool:
    if "setState" in ctx.text or "useState" in ctx.text:
        return False
    return bool(STATE_ASSIGN_RE.search(_code(ctx.text)))


def _import_lines(lines) -> list[str]:
    """Import statements among ``lines``, including the body of a ``{`` clause split over lines."""
    collected: list[str] = []
    in_clause = False
    for line in lines:
        if in_clause:
            collected.append(line)
            in_clause = "}" not in line
        elif IMPORT_LINE_RE.search(line):
            collected.append(line)
            in_clause = bool(IMPORT_OPEN_RE.search(line))
    return collected


def _missing_hook(ctx: LineContext) -> str | None:
    if IMPORT_LINE_RE.search(ctx.text) or _is_comment(ctx):
        return None
    preceding = _import_lines(ctx.before("import_window"))
    for match in HOOK_CALL_RE.finditer(_code(ctx.text)):
        hook = match.group("hook")
        if not any(re.search(rf"\b{hook}\b", line) for line in preceding):
            return hook
    return None


@rule(
    "MISSING_IMPORT",
    ERROR,
    "quality",
    lambda ctx: f"React hook {_missing_hook(ctx)} is used but not imported",
    "Add the hook to the react import",
)
def missing_import(ctx: LineContext) -> bool:
    """Bare hook call with no import naming it within ``import_window`` lines above."""
    return _missing_hook(ctx) is not None


@rule(
    "EFFECT_RUNS_ONCE",
    INFO,
    "performance",
    "useEffect with empty dependency array runs once",
    "Verify the dependencies are correct",
)
def effect_runs_once(ctx: LineContext) -> bool:
    return bool(EFFECT_RE.search(ctx.text)) and bool(EMPTY_DEPS_RE.search(ctx.text))


@rule(
    "INLINE_FUNCTION",
    WARNING,
    "performance",
    "Inline function in event handler creates a new function on every render",
    "Use useCallback or define the handler outside JSX",
)
def inline_function(ctx: LineContext) -> bool:
    return not _is_comment(ctx) and bool(INLINE_HANDLER_RE.search(ctx.text))


@rule(
    "MISSING_PROP_TYPES",
    INFO,
    "quality",
    "Component props should be typed",
    "Define an interface for the component props",
)
def missing_prop_types(ctx: LineContext) -> bool:
    """Exported component in a .tsx file whose parameters carry no type annotation."""
    if not ctx.path.endswith(".tsx"):
        return False
    match = EXPORTED_COMPONENT_RE.search(ctx.text)
    if not match:
        return False
    params = match.group("params").strip()
    if not params or ":" in params:
        return False
    following = ctx.next() or ""
    return "interface" not in ctx.text and "interface" not in following


@rule(
    "MISSING_ERROR_HANDLING",
    WARNING,
    "quality",
    "Promise without error handling",
    "Add .catch() or use try/catch with async/await",
)
def missing_error_handling(ctx: LineContext) -> bool:
    """then() with no catch() on this line or the next ``promise_catch_window`` lines."""
    if not THEN_RE.search(ctx.text):
        return False
    return not _any(CATCH_RE, ctx.here_and_after("promise_catch_window"))


@rule(
    "USE_CONST_LET",
    WARNING,
    "quality",
    "Use const or let instead of var",
    "Replace var with const or let",
)
def use_const_let(ctx: LineContext) -> bool:
    return not _is_comment(ctx) and bool(VAR_RE.search(_code(ctx.text)))


@rule(
    "LONG_LINE",
    INFO,
    "quality",
    lambda ctx: f"Line too long ({len(ctx.text)} characters, max {ctx.limit('max_line_length')})",
    "Break into multiple lines",
)
def long_line(ctx: LineContext) -> bool:
    return len(ctx.text) > ctx.limit("max_line_length")


@rule(
    "HARDCODED_SECRET",
    ERROR,
    "security",
    "Hardcoded secrets detected",
    "Use environment variables",
)
def hardcoded_secret(ctx: LineContext) -> bool:
    return bool(SECRET_RE.search(ctx.text))


@rule(
    "MISSING_EFFECT_DEPENDENCY",
    WARNING,
    "performance",
    "useEffect without dependency array runs on every render",
    "Add a dependency array: useEffect(() => {...}, [deps])",
)
def missing_effect_dependency(ctx: LineContext) -> bool:
    """Effect whose closing line, found within ``effect_deps_window`` lines, passes no dependency array."""
    match = EFFECT_RE.search(ctx.text)
    if not match:
        return False
    if DEPS_ARRAY_RE.search(ctx.text[match.end():]):
        return False
    if ctx.text.rstrip().endswith((")", ");")):
        return True
    indent = _indent(ctx.text)
    for line in ctx.after("effect_deps_window"):
        closing = EFFECT_CLOSE_RE.search(line)
        if closing and _indent(line) == indent:
            return closing.group("deps") is None
    return False


def _leaked_listener(ctx: LineContext) -> str | None:
    match = LISTENER_RE.search(ctx.text)
    if not match:
        return None
    if not EFFECT_RE.search(ctx.text) and not _any(EFFECT_RE, ctx.before("listener_effect_window")):
        return None
    api = match.group("api")
    cleanup = LISTENER_CLEANUP[api]
    if any(cleanup in line for line in ctx.here_and_after("listener_cleanup_window")):
        return None
    return api


@rule(
    "MEMORY_LEAK_RISK",
    WARNING,
    "performance",
    lambda ctx: f"{_leaked_listener(ctx)} in useEffect without cleanup",
    "Return a cleanup function from the effect",
)
def memory_leak_risk(ctx: LineContext) -> bool:
    """Listener or timer registered in an effect with no matching teardown within ``listener_cleanup_window`` lines."""
    return _leaked_listener(ctx) is not None


@rule(
    "PROP_DRILLING",
    INFO,
    "quality",
    "Possible prop drilling detected",
    "Consider Context API or a state management library",
)
def prop_drilling(ctx: LineContext) -> bool:
    return bool(PROP_DRILLING_RE.search(ctx.text))


def _heavy_library(ctx: LineContext) -> str | None:
    match = LIBRARY_IMPORT_RE.search(ctx.text)
    if not match:
        return None
    return match.group("lib") or match.group("req")


@rule(
    "LARGE_LIBRARY_IMPORT",
    WARNING,
    "performance",
    lambda ctx: f"Importing the whole {_heavy_library(ctx)} package increases bundle size",
    "Import only the functions you need or use a lighter alternative",
)
def large_library_import(ctx: LineContext) -> bool:
    return _heavy_library(ctx) is not None


@rule(
    "ACCESSIBILITY_MISSING",
    WARNING,
    "accessibility",
    "Interactive element may be missing accessibility attributes",
    "Add role and aria-label attributes",
)
def accessibility_missing(ctx: LineContext) -> bool:
    return bool(CLICKABLE_ELEMENT_RE.search(ctx.text)) and not ARIA_RE.search(ctx.text)


@rule(
    "MISSING_ALT_TEXT",
    ERROR,
    "accessibility",
    "Image missing alt text",
    "Add an alt attribute for accessibility",
)
def missing_alt_text(ctx: LineContext) -> bool:
    """img tag with no alt attribute before the tag closes, up to ``img_tag_window`` lines on."""
    match = IMG_TAG_RE.search(ctx.text)
    if not match:
        return False
    tail = ctx.text[match.start():]
    if ALT_RE.search(tail):
        return False
    if ">" in tail:
        return True
    for line in ctx.after("img_tag_window"):
        head = line.split(">", 1)[0]
        if ALT_RE.search(head):
            return False
        if ">" in line:
            return True
    return True


def _handler_name(ctx: LineContext) -> str | None:
    match = HANDLER_DECL_RE.search(ctx.text)
    if not match or "useCallback" in ctx.text:
        return None
    return match.group("name")


@rule(
    "CONSIDER_USECALLBACK",
    INFO,
    "performance",
    lambda ctx: f"Handler {_handler_name(ctx)} is recreated on every render",
    "Wrap it in useCallback if it is passed to child components",
)
def consider_usecallback(ctx: LineContext) -> bool:
    return _handler_name(ctx) is not None


@rule(
    "CONSIDER_USEMEMO",
    INFO,
    "performance",
    "Derived data is recomputed on every render",
    "Use useMemo to cache the computation",
)
def consider_usememo(ctx: LineContext) -> bool:
    return "useMemo" not in ctx.text and bool(DERIVED_DATA_RE.search(ctx.text))


@rule(
    "CHECK_PEER_DEPENDENCIES",
    WARNING,
    "quality",
    "Side-effect import of a scoped package",
    "Verify the package and its peer dependencies are installed",
)
def check_peer_dependencies(ctx: LineContext) -> bool:
    return bool(SCOPED_SIDE_EFFECT_IMPORT_RE.search(ctx.text))


@rule(
    "CONSIDER_ERROR_BOUNDARY",
    INFO,
    "quality",
    "Consider an Error Boundary for component errors",
    "Wrap components in an ErrorBoundary",
)
def consider_error_boundary(ctx: LineContext) -> bool:
    if not TRY_BLOCK_RE.search(ctx.text):
        return False
    return not _any(ERROR_BOUNDARY_RE, ctx.before("error_boundary_window"))


def _misnamed_hook(ctx: LineContext) -> str | None:
    if not ctx.file_name.startswith("use") or ctx.path.endswith((".jsx", ".tsx")):
        return None
    match = EXPORTED_NAME_RE.search(ctx.text)
    if not match:
        return None
    name = match.group("func") or match.group("const")
    if name.startswith("use"):
        return None
    return name


@rule(
    "HOOK_NAMING",
    INFO,
    "quality",
    lambda ctx: f"Custom hook {_misnamed_hook(ctx)} should start with 'use'",
    "Rename the hook with a use prefix",
)
def hook_naming(ctx: LineContext) -> bool:
    """Export from a use* module whose name lacks the use prefix."""
    return _misnamed_hook(ctx) is not None


@rule(
    "COMPLEX_STATE_MGMT",
    INFO,
    "quality",
    "Multiple state hooks - consider useReducer",
    "Use useReducer for complex state logic",
)
def complex_state_mgmt(ctx: LineContext) -> bool:
    """First useState of a cluster of at least ``state_hook_count`` state hooks."""
    if not USE_STATE_RE.search(ctx.text):
        return False
    if _any(USE_STATE_RE, ctx.before("state_hooks_window")):
        return False
    following = sum(1 for line in ctx.after("state_hooks_window") if STATE_HOOK_RE.search(line))
    return following + 1 >= ctx.limit("state_hook_count")


@rule(
    "INLINE_STYLES",
    INFO,
    "quality",
    "Inline styles detected",
    "Use CSS modules or styled-components",
)
def inline_styles(ctx: LineContext) -> bool:
    return bool(INLINE_STYLE_RE.search(ctx.text))


@rule(
    "MISSING_SEO_HEAD",
    INFO,
    "quality",
    "Page component without SEO metadata",
    "Add Head or metadata with a title and description",
)
def missing_seo_head(ctx: LineContext) -> bool:
    """Default export of a page module with no head metadata within ``seo_head_window`` lines."""
    if "page" not in ctx.path.lower() or not EXPORT_DEFAULT_RE.search(ctx.text):
        return False
    nearby = ctx.before("seo_head_window") + ctx.here_and_after("seo_head_window")
    return not _any(SEO_HEAD_RE, nearby)


def _imported_names(text: str) -> list[str]:
    match = IMPORT_CLAUSE_RE.search(text)
    if not match:
        return []
    clause = match.group("clause")
    names: list[str] = []
    named = NAMED_IMPORTS_RE.search(clause)
    if named:
        for part in named.group("names").split(","):
            part = part.strip()
            if not part or part.startswith("type "):
                continue
            names.append(part.split(" as ")[-1].strip())
        clause = clause[: named.start()] + clause[named.end():]
    namespace = NAMESPACE_IMPORT_RE.search(clause)
    if namespace:
        names.append(namespace.group("name"))
        clause = clause[: namespace.start()] + clause[namespace.end():]
    default = clause.strip().strip(",").strip()
    if default and re.fullmatch(r"[\w$]+", default):
        names.insert(0, default)
    return [name for name in names if name != "React"]


def _unused_imports(ctx: LineContext) -> list[str]:
    names = _imported_names(ctx.text)
    if not names:
        return []
    following = [_code(line) for line in ctx.after("unused_import_window")]
    return [
        name
        for name in names
        if not any(re.search(rf"(?<![\w$]){re.escape(name)}(?![\w$])", line) for line in following)
    ]


@rule(
    "UNUSED_IMPORT",
    WARNING,
    "quality",
    lambda ctx: f"Imported {', '.join(_unused_imports(ctx))} appears unused",
    "Remove unused imports",
)
def unused_import(ctx: LineContext) -> bool:
    """Imported identifiers never referenced within ``unused_import_window`` lines below."""
    return bool(_unused_imports(ctx))


REACT_RULES = (
    console_log,
    console_output,
    missing_key_prop,
    direct_state_mutation,
    missing_import,
    effect_runs_once,
    inline_function,
    missing_prop_types,
    missing_error_handling,
    use_const_let,
    long_line,
    hardcoded_secret,
    missing_effect_dependency,
    memory_leak_risk,
    prop_drilling,
    large_library_import,
    accessibility_missing,
    missing_alt_text,
    consider_usecallback,
    consider_usememo,
    check_peer_dependencies,
    consider_error_boundary,
    hook_naming,
    complex_state_mgmt,
    inline_styles,
    missing_seo_head,
    unused_import,
)


def build_react_catalog() -> RuleCatalog:
    return RuleCatalog(
        "react",
        REACT_RULES,
        comment_policy=REACT_COMMENT_POLICY,
        thresholds=REACT_THRESHOLDS,
    )
