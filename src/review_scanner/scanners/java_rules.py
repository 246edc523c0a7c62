"""Rule catalog for Java sources.

Every predicate here is a line-level approximation: it looks at one line plus a
bounded window of neighbours and will produce both false positives and false
negatives. Window sizes and numeric limits live in ``JAVA_THRESHOLDS``.
"""

from __future__ import annotations

import re
from functools import lru_cache

from review_scanner.models import ERROR, INFO, WARNING
from review_scanner.scanners.catalog import CommentPolicy, LineContext, RuleCatalog, rule


JAVA_THRESHOLDS = {
    "max_line_length": 120,
    "magic_number_min_digits": 3,
    "max_logical_operators": 2,
    "nested_loop_window": 5,
    "null_check_window": 3,
    "resource_close_window": 10,
    "coverage_window": 10,
    "stream_window": 9,
    "loop_window": 5,
    "unreachable_window": 2,
    "double_check_window": 2,
    "busy_wait_window": 4,
    "threadlocal_window": 9,
    "iteration_window": 5,
    "deserialization_window": 10,
    "serial_uid_window": 40,
    "list_remove_window": 3,
    "mutable_collection_window": 9,
    "transactional_lookback": 3,
    "lazy_window": 10,
    "bean_scope_window": 4,
    "transactional_window": 2,
    "allocation_loop_window": 5,
    "weakref_window": 5,
    "map_get_window": 2,
    "map_null_check_window": 1,
    "xxe_window": 10,
    "path_input_window": 1,
    "sort_loop_window": 3,
    "finally_window": 2,
    "log_injection_window": 5,
}

JAVA_COMMENT_POLICY = CommentPolicy(
    doc_label="JavaDoc",
    doc_tags=("@param", "@return", "@throws"),
    min_doc_length=50,
)

STRING_LITERAL_RE = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'')
IMPORT_RE = re.compile(r"^\s*(?:import|package)\s")
SYSTEM_PRINT_RE = re.compile(r"\bSystem\.(?:out|err)\.print(?:ln|f)?\s*\(")
EMPTY_CATCH_RE = re.compile(r"\bcatch\b.*\{\s*\}")
BARE_TODO_RE = re.compile(r"//\s*TODO\b[\s:\-]*$")
CONSTANT_DECL_RE = re.compile(r"\bstatic\s+final\b|\bfinal\s+static\b")
CLASS_DECL_RE = re.compile(r"^\s*(?:(?:abstract|final|static)\s+)*class\s+\w+")
ACCESS_MODIFIER_RE = re.compile(r"\b(?:public|private|protected)\b")
THREAD_SLEEP_RE = re.compile(r"\bThread\.sleep\s*\(")
SECRET_RE = re.compile(
    r"(?:password|passwd|secret|token|api[_-]?key|private[_-]?key)\s*[=:]\s*[\"'][^\"']+",
    re.IGNORECASE,
)
WILDCARD_IMPORT_RE = re.compile(r"^\s*import\s+(?:static\s+)?[\w.]+\.\*\s*;")
PUBLIC_METHOD_RE = re.compile(
    r"\bpublic\s+(?:(?:static|final|synchronized|abstract|native)\s+)*[\w<>\[\],.?]+\s+(?P<name>\w+)\s*\("
)
FOR_RE = re.compile(r"\bfor\s*\(")
LOOP_RE = re.compile(r"\b(?:for|while)\s*\(")
LOOP_KEYWORD_RE = re.compile(r"\b(?:for|while|do)\b")
SQL_CONCAT_RE = re.compile(
    r"\b(?:query|sql|statement)\w*\s*=\s*[\"'].*[\"']\s*\+"
    r"|\.(?:execute|executeQuery|executeUpdate|prepareStatement)\s*\(\s*[\"'].*[\"']\s*\+",
    re.IGNORECASE,
)
NULL_RISK_RE = re.compile(r"\.(?:toString\(\)|equals\(|length\(\))")
LITERAL_EQUALS_RE = re.compile(r"[\"']\.equals\(")
DB_ASSIGN_RE = re.compile(r"(?:jdbc|database|host|connection|url)\s*[=:]\s*[\"']")
JDBC_LITERAL_RE = re.compile(r"[\"']jdbc:[^\"']*")
LOCAL_HOST_RE = re.compile(r"localhost|127\.0\.0\.1|192\.168\.")
RESOURCE_OPEN_RE = re.compile(
    r"\bnew\s+(?:FileInputStream|FileOutputStream|FileReader|FileWriter|BufferedReader|BufferedWriter)\b"
    r"|\bgetConnection\s*\("
)
CLOSE_CALL_RE = re.compile(r"\bclose\s*\(\s*\)")
TRY_WITH_RESOURCES_RE = re.compile(r"\btry\s*\(")
LOG_DEBUG_INFO_RE = re.compile(r"\blog(?:ger)?\.(?:debug|info)\s*\(")
TIMING_WORDS_RE = re.compile(r"performance|timing|benchmark|duration|elapsed|latency")
BRANCH_TOKEN_RE = re.compile(r"&&|\|\||\s\?\s")
INDEXED_FOR_RE = re.compile(r"\bfor\s*\(\s*int\s+\w+")
COLLECTION_BUILD_RE = re.compile(r"\.(?:add|filter)\s*\(")
GENERIC_CATCH_RE = re.compile(r"\bcatch\s*\(\s*(?:final\s+)?(?:Exception|Throwable)\s+\w+\s*\)")
MUTABLE_STATIC_FIELD_RE = re.compile(
    r"^\s*(?:private\s+static|static\s+private)\s+(?!final\b)[\w<>\[\],.? ]+?\s+\w+\s*(?:=|;)"
)
RESOURCE_HANDLE_RE = re.compile(
    r"\bnew\s+(?:FileInputStream|Socket|ServerSocket)\s*\(|\bConnection\s+\w+\s*="
)
CONCAT_RE = re.compile(r"[\"']\s*\+|\+\s*[\"']|\+=\s*[\"']")
LOGICAL_OPERATOR_RE = re.compile(r"&&|\|\|")
RETURN_STATEMENT_RE = re.compile(r"^return\b[^;]*;\s*$")
STATEMENT_START_RE = re.compile(r"^\s*\w+")
BRANCH_LABEL_RE = re.compile(r"^\s*(?:case\b|default\s*:|else\b|catch\b|finally\b)")
SNAKE_ASSIGN_RE = re.compile(r"\b[a-z][a-z0-9]*_[a-z0-9_]*\s*=(?!=)")
OVERRIDE_RE = re.compile(r"@Override\b")
PARSE_METHOD_RE = re.compile(r"\bpublic\b.*\bparse\w*\s*\(")
THROWS_GENERIC_RE = re.compile(r"\bthrows\s+(?:[\w.]+\s*,\s*)*(?:Exception|Throwable)\b")
NULL_CHECK_IF_RE = re.compile(r"\bif\s*\(.*==\s*null")
SYNCHRONIZED_RE = re.compile(r"\bsynchronized\b")
BUSY_WAIT_RE = re.compile(r"\bwhile\s*\(\s*(?:true|!?\w+)\s*\)")
SLEEP_RE = re.compile(r"\bsleep\s*\(")
THREADLOCAL_DECL_RE = re.compile(r"\bnew\s+ThreadLocal\b|\bThreadLocal\.withInitial\s*\(|\bThreadLocal\s*<.*=")
ITERATOR_RE = re.compile(r"\bIterator\b|\.iterator\(\)")
VOLATILE_RE = re.compile(r"\bvolatile\b")
VOLATILE_SIMPLE_RE = re.compile(r"\bvolatile\s+(?:boolean|int|long|double|float|short|byte|char|Object)\b", re.IGNORECASE)
SET_ACCESSIBLE_RE = re.compile(r"\.setAccessible\s*\(\s*true\s*\)")
OBJECT_INPUT_STREAM_RE = re.compile(r"\bnew\s+ObjectInputStream\b")
DESERIALIZATION_GUARD_RE = re.compile(r"validat|filter", re.IGNORECASE)
SERIALIZABLE_RE = re.compile(r"\bimplements\b.*\bSerializable\b")
STREAM_CALL_RE = re.compile(r"\.stream\(\)")
STREAM_TERMINAL_RE = re.compile(
    r"\.(?:collect|forEach|map|filter|count|reduce|anyMatch|allMatch|noneMatch|findFirst|findAny|toList|sorted)\s*\("
)
PARALLEL_STREAM_RE = re.compile(r"\.parallelStream\(\)|\.parallel\(\)")
REMOVE_CALL_RE = re.compile(r"\b(?P<receiver>\w+)\.remove\s*\(")
ITERATOR_VAR_RE = re.compile(r"\bIterator\s*(?:<[^=]*>)?\s+(?P<name>\w+)\s*=")
COLLECT_TO_LIST_RE = re.compile(r"\.collect\s*\(\s*Collectors\.toList\s*\(\s*\)\s*\)")
MUTATION_CALL_RE = re.compile(r"\.(?:add|remove)\s*\(")
DB_MUTATION_METHOD_RE = re.compile(r"\bpublic\b[^=;]*\b(?:insert|update|delete)\w*\s*\(")
TRANSACTIONAL_RE = re.compile(r"@Transactional\b")
GET_CALL_RE = re.compile(r"\.get\s*\(")
LAZY_RE = re.compile(r"\bLazy\b|FetchType\.LAZY")
COMPONENT_RE = re.compile(r"@Component\b")
SCOPE_RE = re.compile(r"@Scope\b")
MUTABLE_FIELD_RE = re.compile(r"^\s*private\s+(?!final\b)(?!static\b)[\w<>\[\],.? ]+?\s+\w+\s*[;=]")
PUBLIC_RE = re.compile(r"\bpublic\b")
NEW_OBJECT_RE = re.compile(r"\bnew\s+\w")
INTERN_RE = re.compile(r"\.intern\s*\(\s*\)")
WEAKREF_RE = re.compile(r"\b(?:Weak|Soft)Reference\b")
NULL_COMPARE_RE = re.compile(r"[!=]=\s*null")
CLONE_RE = re.compile(r"\.clone\s*\(\s*\)")
SINGLETON_RE = re.compile(r"\bpublic\s+static\b(?!.*\bfinal\b).*\bINSTANCE\b")
MAP_TYPE_RE = re.compile(r"\b(?:Hash)?Map\b")
GET_OR_DEFAULT_RE = re.compile(r"\.getOrDefault\s*\(")
NOT_NULL_RE = re.compile(r"!=\s*null")
SHARED_MODIFIER_RE = re.compile(r"\b(?:static|public)\b")
SIMPLE_DATE_FORMAT_RE = re.compile(r"\bSimpleDateFormat\b")
REGEX_API_RE = re.compile(r"\bPattern\.compile\s*\(|\.matches\s*\(")
BACKTRACKING_RE = re.compile(r"\.\*\+|\+\*|\{\d+,\}.*\(\w+\||\([^()]*[+*]\)[+*{]")
XML_PARSER_RE = re.compile(
    r"\b(?:DocumentBuilderFactory|SAXParserFactory|XMLInputFactory)\.newInstance\s*\(|\bnew\s+SAXParser\b"
)
XXE_GUARD_RE = re.compile(r"XXE|disallow|setFeature|ACCESS_EXTERNAL", re.IGNORECASE)
COMPARATOR_RE = re.compile(r"\bComparator\b.*\bcompare\s*\(")
NUMBER_FORMAT_RE = re.compile(r"\b(?:NumberFormat|DecimalFormat)\b")
EXEC_RE = re.compile(r"\bexec\s*\(|\bProcessBuilder\s*\(")
DYNAMIC_STRING_RE = re.compile(r"\+|\bconcat\s*\(|\bformat\s*\(")
FILE_ACCESS_RE = re.compile(
    r"\bnew\s+File(?:InputStream|OutputStream|Reader|Writer)?\s*\("
    r"|\bFiles\.(?:read\w*|newInputStream|newBufferedReader|lines|write)\s*\("
    r"|\bPaths\.get\s*\("
)
USER_INPUT_RE = re.compile(r"user|input|request|param", re.IGNORECASE)
LDAP_RE = re.compile(r"ldap", re.IGNORECASE)
INSECURE_RANDOM_RE = re.compile(r"\bnew\s+Random\s*\(")
WEAK_CRYPTO_RE = re.compile(r"\b(?:MD5|SHA-?1|DES|RC4)\b")
SEARCH_CALL_RE = re.compile(r"\.(?:contains|indexOf)\s*\(")
ARITHMETIC_RE = re.compile(r"\s[+*-]\s")
INT_CONTEXT_RE = re.compile(r"\bint\s+\w+|\bInteger\b")
MODULO_RE = re.compile(r"\w\s*%\s*\w")
SORT_RE = re.compile(r"\.sort\s*\(")
ASSERT_RE = re.compile(r"^\s*assert[\s(]")
FINALLY_RE = re.compile(r"\bfinally\b")
LOG_CALL_RE = re.compile(r"\blog(?:ger)?\.\w+\s*\(|\bSystem\.out\b")
LOG_WRITE_RE = re.compile(r"\blog(?:ger)?\.(?:trace|debug|info|warn|error)\s*\(")
LOG_ARGUMENT_RE = re.compile(r"\+|\{\}")
REQUEST_DATA_RE = re.compile(r"user|input|request")


@lru_cache(maxsize=16)
def _digits_re(min_digits: int) -> re.Pattern[str]:
    return re.compile(rf"\b\d{{{max(1, min_digits)},}}\b")


def _code(text: str) -> str:
    """Line text with string literals blanked out."""
    return STRING_LITERAL_RE.sub('""', text)


def _is_comment(ctx: LineContext) -> bool:
    return ctx.stripped.startswith(("//", "*"))


def _any(pattern: re.Pattern[str], lines) -> bool:
    return any(pattern.search(line) for line in lines)


@rule(
    "USE_LOGGING_FRAMEWORK",
    WARNING,
    "quality",
    "Use a logging framework instead of System.out/err.println",
    "Replace with logger.info() or logger.error()",
)
def use_logging_framework(ctx: LineContext) -> bool:
    """Console printing through System.out or System.err."""
    return not _is_comment(ctx) and bool(SYSTEM_PRINT_RE.search(ctx.text))


@rule(
    "EMPTY_CATCH_BLOCK",
    ERROR,
    "quality",
    "Empty catch blocks silently ignore exceptions",
    "Add proper error handling or at least log the exception",
)
def empty_catch_block(ctx: LineContext) -> bool:
    """A catch clause whose braces close on the same line with nothing inside."""
    return bool(EMPTY_CATCH_RE.search(_code(ctx.text)))


@rule(
    "INCOMPLETE_TODO",
    INFO,
    "documentation",
    "TODO comment without description",
    "Add details about what needs to be done",
)
def incomplete_todo(ctx: LineContext) -> bool:
    """Line comment holding a bare TODO marker."""
    return bool(BARE_TODO_RE.search(ctx.text))


def _magic_number_message(ctx: LineContext) -> str:
    match = _digits_re(ctx.limit("magic_number_min_digits")).search(_code(ctx.text))
    value = match.group(0) if match else "literal"
    return f"Magic number {value} should be extracted to a named constant"


@rule(
    "MAGIC_NUMBER",
    WARNING,
    "quality",
    _magic_number_message,
    "Create: private static final int CONSTANT_NAME = ...",
)
def magic_number(ctx: LineContext) -> bool:
    """Numeric literal with at least ``magic_number_min_digits`` digits outside constant declarations."""
    if _is_comment(ctx) or IMPORT_RE.search(ctx.text) or CONSTANT_DECL_RE.search(ctx.text):
        return False
    return bool(_digits_re(ctx.limit("magic_number_min_digits")).search(_code(ctx.text)))


@rule(
    "MISSING_ACCESS_MODIFIER",
    WARNING,
    "quality",
    "Class should have explicit access modifier",
    "Add public/private/protected modifier",
)
def missing_access_modifier(ctx: LineContext) -> bool:
    """Class declaration without public, private or protected."""
    return bool(CLASS_DECL_RE.search(ctx.text)) and not ACCESS_MODIFIER_RE.search(ctx.text)


@rule(
    "LONG_LINE",
    INFO,
    "quality",
    lambda ctx: f"Line is too long ({len(ctx.text)} characters, max {ctx.limit('max_line_length')})",
    "Break this line into multiple lines",
)
def long_line(ctx: LineContext) -> bool:
    """Line longer than ``max_line_length`` characters."""
    return len(ctx.text) > ctx.limit("max_line_length")


@rule(
    "THREAD_SLEEP",
    WARNING,
    "performance",
    "Avoid Thread.sleep() in production code",
    "Use scheduled executors or other async patterns",
)
def thread_sleep(ctx: LineContext) -> bool:
    return not _is_comment(ctx) and bool(THREAD_SLEEP_RE.search(ctx.text))


@rule(
    "HARDCODED_SECRET",
    ERROR,
    "security",
    "Hardcoded secrets detected",
    "Use environment variables or secure vaults",
)
def hardcoded_secret(ctx: LineContext) -> bool:
    """Credential-like name assigned a non-empty string literal."""
    return bool(SECRET_RE.search(ctx.text))


@rule(
    "WILDCARD_IMPORT",
    ERROR,
    "quality",
    "Wildcard imports make code harder to understand",
    "Use explicit imports instead",
)
def wildcard_import(ctx: LineContext) -> bool:
    return bool(WILDCARD_IMPORT_RE.search(ctx.text))


@rule(
    "MISSING_JAVADOC",
    WARNING,
    "documentation",
    "Public method should have JavaDoc",
    "Add /** @param @return @throws */ comment",
)
def missing_javadoc(ctx: LineContext) -> bool:
    """Public method whose previous line is neither a doc comment nor an annotation."""
    if not PUBLIC_METHOD_RE.search(ctx.text):
        return False
    previous = ctx.previous()
    if previous is None:
        return False
    previous = previous.strip()
    return not previous.startswith("*") and "@" not in previous and "/**" not in previous


@rule(
    "NESTED_LOOPS",
    INFO,
    "performance",
    "Nested loops detected - review performance",
    "Consider streams or refactoring",
)
def nested_loops(ctx: LineContext) -> bool:
    """For loop with another for loop in the preceding ``nested_loop_window`` lines."""
    return bool(FOR_RE.search(ctx.text)) and _any(FOR_RE, ctx.before("nested_loop_window"))


@rule(
    "SQL_INJECTION_RISK",
    ERROR,
    "security",
    "Potential SQL injection - using string concatenation",
    "Use PreparedStatement with ? placeholders",
)
def sql_injection_risk(ctx: LineContext) -> bool:
    """SQL text built by concatenating onto a string literal."""
    if "PreparedStatement" in ctx.text or "?" in ctx.text:
        return False
    return bool(SQL_CONCAT_RE.search(ctx.text))


@rule(
    "NULL_POINTER_RISK",
    WARNING,
    "quality",
    "Potential NullPointerException - no null check",
    "Add: if (object != null) { ... }",
)
def null_pointer_risk(ctx: LineContext) -> bool:
    """Dereferencing call with no null check on this line or the preceding ``null_check_window`` lines."""
    if _is_comment(ctx) or not NULL_RISK_RE.search(ctx.text):
        return False
    if LITERAL_EQUALS_RE.search(ctx.text) or "!= null" in ctx.text:
        return False
    return not any("!= null" in line or "null check" in line for line in ctx.before("null_check_window"))


@rule(
    "HARDCODED_DATABASE_URL",
    ERROR,
    "security",
    "Hardcoded database URL detected",
    "Use configuration files or environment variables",
)
def hardcoded_database_url(ctx: LineContext) -> bool:
    if not LOCAL_HOST_RE.search(ctx.text):
        return False
    return bool(DB_ASSIGN_RE.search(ctx.lower) or JDBC_LITERAL_RE.search(ctx.text))


@rule(
    "RESOURCE_LEAK",
    ERROR,
    "performance",
    "Resource opened without cleanup - memory leak risk",
    "Use try-with-resources: try (Resource r = ...) { ... }",
)
def resource_leak(ctx: LineContext) -> bool:
    """Stream or connection opened with no close() within ``resource_close_window`` lines."""
    if not RESOURCE_OPEN_RE.search(ctx.text) or TRY_WITH_RESOURCES_RE.search(ctx.text):
        return False
    return not _any(CLOSE_CALL_RE, ctx.here_and_after("resource_close_window"))


@rule(
    "LOG_LEVEL_MISUSE",
    INFO,
    "performance",
    "Performance metrics should use metrics library",
    "Use Micrometer, Prometheus or metrics framework",
)
def log_level_misuse(ctx: LineContext) -> bool:
    return bool(LOG_DEBUG_INFO_RE.search(ctx.text)) and bool(TIMING_WORDS_RE.search(ctx.lower))


@rule(
    "TEST_COVERAGE_HINT",
    INFO,
    "testing",
    "Complex public method should have unit tests",
    "Add tests for multiple code paths",
)
def test_coverage_hint(ctx: LineContext) -> bool:
    """Public method with branching operators within ``coverage_window`` lines."""
    return bool(PUBLIC_METHOD_RE.search(ctx.text)) and _any(
        BRANCH_TOKEN_RE, ctx.here_and_after("coverage_window")
    )


@rule(
    "USE_STREAM_API",
    INFO,
    "quality",
    "Traditional loop could use Stream API",
    "Use .stream().filter().map().collect()",
)
def use_stream_api(ctx: LineContext) -> bool:
    """Indexed for loop that builds or filters a collection nearby."""
    return bool(INDEXED_FOR_RE.search(ctx.text)) and _any(
        COLLECTION_BUILD_RE, ctx.here_and_after("stream_window")
    )


@rule(
    "GENERIC_EXCEPTION",
    WARNING,
    "quality",
    "Catching generic Exception is too broad",
    "Catch specific exceptions: IOException, SQLException",
)
def generic_exception(ctx: LineContext) -> bool:
    return bool(GENERIC_CATCH_RE.search(ctx.text))


@rule(
    "THREAD_SAFETY_RISK",
    WARNING,
    "concurrency",
    "Mutable shared state - thread safety concern",
    "Use synchronization or immutable data",
)
def thread_safety_risk(ctx: LineContext) -> bool:
    """Private static field that is neither final nor synchronized."""
    if "synchronized" in ctx.text or "(" in ctx.text.split("=", 1)[0]:
        return False
    return bool(MUTABLE_STATIC_FIELD_RE.search(ctx.text))


@rule(
    "RESOURCE_MANAGEMENT",
    ERROR,
    "quality",
    "Resource should use try-with-resources",
    "try (Resource r = new Resource()) { ... }",
)
def resource_management(ctx: LineContext) -> bool:
    """Stream, socket or connection acquired outside a try header on this or the previous line."""
    if not RESOURCE_HANDLE_RE.search(ctx.text) or "try" in ctx.text:
        return False
    previous = ctx.previous()
    return previous is not None and "try" not in previous


@rule(
    "PERFORMANCE_HOTSPOT",
    WARNING,
    "performance",
    "String concatenation in loop - performance issue",
    "Use StringBuilder: new StringBuilder().append(...)",
)
def performance_hotspot(ctx: LineContext) -> bool:
    """String concatenation with a loop keyword in the preceding ``loop_window`` lines."""
    if not CONCAT_RE.search(ctx.text):
        return False
    return _any(LOOP_KEYWORD_RE, ctx.before("loop_window"))


@rule(
    "HIGH_COMPLEXITY",
    INFO,
    "quality",
    lambda ctx: (
        f"Complex conditional logic detected ({len(LOGICAL_OPERATOR_RE.findall(ctx.text))} logical operators)"
    ),
    "Extract to separate method or use strategy pattern",
)
def high_complexity(ctx: LineContext) -> bool:
    """More than ``max_logical_operators`` && / || tokens on one line."""
    return len(LOGICAL_OPERATOR_RE.findall(ctx.text)) > ctx.limit("max_logical_operators")


@rule(
    "UNREACHABLE_CODE",
    WARNING,
    "quality",
    "Code after return statement is unreachable",
    "Remove dead code",
)
def unreachable_code(ctx: LineContext) -> bool:
    """A statement follows a return before the enclosing block closes."""
    if not RETURN_STATEMENT_RE.search(ctx.stripped):
        return False
    for line in ctx.after("unreachable_window"):
        stripped = line.strip()
        if not stripped or stripped.startswith(("//", "/*", "*")):
            continue
        if stripped.startswith("}") or BRANCH_LABEL_RE.search(line):
            return False
        return bool(STATEMENT_START_RE.search(line))
    return False


@rule(
    "NAMING_CONVENTION",
    INFO,
    "quality",
    "Variable uses snake_case instead of camelCase",
    "Use camelCase: myVariable instead of my_variable",
)
def naming_convention(ctx: LineContext) -> bool:
    return not _is_comment(ctx) and bool(SNAKE_ASSIGN_RE.search(_code(ctx.text)))


@rule(
    "ANNOTATION_PLACEMENT",
    INFO,
    "quality",
    "@Override should be on method declaration",
    "Place @Override directly above the method signature",
)
def annotation_placement(ctx: LineContext) -> bool:
    """@Override not followed by a public or protected declaration."""
    if not OVERRIDE_RE.search(ctx.text):
        return False
    following = ctx.next()
    if following is None:
        return False
    return "public" not in following and "protected" not in following


@rule(
    "API_DESIGN",
    INFO,
    "documentation",
    "Parse methods should document expected format and exceptions",
    "Add JavaDoc with @throws for parsing failures",
)
def api_design(ctx: LineContext) -> bool:
    return "String" in ctx.text and bool(PARSE_METHOD_RE.search(ctx.text))


@rule(
    "THROWS_GENERIC_EXCEPTION",
    INFO,
    "quality",
    "Methods should throw specific exceptions",
    "Throw IOException, SQLException, etc. instead of generic Exception",
)
def throws_generic_exception(ctx: LineContext) -> bool:
    return bool(THROWS_GENERIC_RE.search(ctx.text))


@rule(
    "DOUBLE_CHECKED_LOCKING",
    WARNING,
    "concurrency",
    "Double-checked locking pattern detected - broken pattern",
    "Use eager initialization or synchronized blocks properly",
)
def double_checked_locking(ctx: LineContext) -> bool:
    """Null check, then synchronized, then another null check within ``double_check_window`` lines."""
    if not NULL_CHECK_IF_RE.search(ctx.text):
        return False
    seen_lock = False
    for line in ctx.after("double_check_window"):
        if SYNCHRONIZED_RE.search(line):
            seen_lock = True
            if NULL_CHECK_IF_RE.search(line.split("synchronized", 1)[1]):
                return True
        elif seen_lock and NULL_CHECK_IF_RE.search(line):
            return True
    return False


@rule(
    "BUSY_WAIT_LOOP",
    WARNING,
    "concurrency",
    "Busy-wait loop detected - wastes CPU",
    "Use wait/notify or other synchronization primitives",
)
def busy_wait_loop(ctx: LineContext) -> bool:
    return bool(BUSY_WAIT_RE.search(ctx.text)) and _any(SLEEP_RE, ctx.here_and_after("busy_wait_window"))


@rule(
    "THREADLOCAL_MEMORY_LEAK",
    WARNING,
    "concurrency",
    "ThreadLocal without remove() cleanup - memory leak in app servers",
    "Add ThreadLocal.remove() in finally or cleanup code",
)
def threadlocal_memory_leak(ctx: LineContext) -> bool:
    if not THREADLOCAL_DECL_RE.search(ctx.text):
        return False
    return not any(".remove()" in line for line in ctx.here_and_after("threadlocal_window"))


@rule(
    "CONCURRENTHASHMAP_ITERATION",
    WARNING,
    "concurrency",
    "Iterating ConcurrentHashMap during modification may skip entries",
    "Use proper synchronization or snapshots if concurrent modification expected",
)
def concurrenthashmap_iteration(ctx: LineContext) -> bool:
    if not ITERATOR_RE.search(ctx.text):
        return False
    return any("ConcurrentHashMap" in line for line in ctx.before("iteration_window"))


@rule(
    "VOLATILE_MISUSE",
    WARNING,
    "concurrency",
    "Volatile keyword used incorrectly - only for simple fields",
    "Volatile doesn't provide full synchronization",
)
def volatile_misuse(ctx: LineContext) -> bool:
    return bool(VOLATILE_RE.search(ctx.text)) and not VOLATILE_SIMPLE_RE.search(ctx.text)


@rule(
    "UNSAFE_REFLECTION",
    WARNING,
    "security",
    "setAccessible(true) breaks encapsulation - security risk",
    "Avoid reflection when possible, use proper design",
)
def unsafe_reflection(ctx: LineContext) -> bool:
    return bool(SET_ACCESSIBLE_RE.search(ctx.text))


@rule(
    "UNSAFE_DESERIALIZATION",
    ERROR,
    "security",
    "ObjectInputStream without validation - arbitrary code execution risk",
    "Use deserialization filters or avoid ObjectInputStream",
)
def unsafe_deserialization(ctx: LineContext) -> bool:
    if not OBJECT_INPUT_STREAM_RE.search(ctx.text):
        return False
    return not _any(DESERIALIZATION_GUARD_RE, ctx.here_and_after("deserialization_window"))


@rule(
    "MISSING_SERIALVERSIONUID",
    WARNING,
    "quality",
    "Serializable class without serialVersionUID field",
    "Add: private static final long serialVersionUID = 1L;",
)
def missing_serialversionuid(ctx: LineContext) -> bool:
    """Serializable class with no serialVersionUID within ``serial_uid_window`` lines."""
    if not SERIALIZABLE_RE.search(ctx.text):
        return False
    return not any("serialVersionUID" in line for line in ctx.here_and_after("serial_uid_window"))


@rule(
    "STREAM_NOT_TERMINATED",
    INFO,
    "performance",
    "Stream created but no terminal operation - lazy, nothing happens",
    "Add terminal operation: .collect(), .forEach(), .count(), etc.",
)
def stream_not_terminated(ctx: LineContext) -> bool:
    """Stream opened on a line that neither continues the chain nor terminates it."""
    if not STREAM_CALL_RE.search(ctx.text) or STREAM_TERMINAL_RE.search(ctx.text):
        return False
    following = ctx.next()
    return following is None or not following.strip().startswith(".")


@rule(
    "PARALLEL_STREAM_OVERHEAD",
    INFO,
    "performance",
    "parallelStream() overhead may exceed benefit on small datasets",
    "Use for large collections (1000+), consider thread pool",
)
def parallel_stream_overhead(ctx: LineContext) -> bool:
    return bool(PARALLEL_STREAM_RE.search(ctx.text))


@rule(
    "ITERATOR_MODIFICATION",
    ERROR,
    "quality",
    "Modifying collection during iteration - ConcurrentModificationException",
    "Use iterator.remove() or collect to new list first",
)
def iterator_modification(ctx: LineContext) -> bool:
    """Collection remove() while an iterator declared nearby is live."""
    match = REMOVE_CALL_RE.search(ctx.text)
    if not match:
        return False
    preceding = ctx.before("iteration_window")
    if not _any(ITERATOR_RE, preceding):
        return False
    iterator_names = {found.group("name") for line in preceding for found in ITERATOR_VAR_RE.finditer(line)}
    return match.group("receiver") not in iterator_names


@rule(
    "INEFFICIENT_LIST_OPERATIONS",
    WARNING,
    "performance",
    "ArrayList.remove() in loop is O(n^2)",
    "Use iterator.remove() or collect matching items to new list",
)
def inefficient_list_operations(ctx: LineContext) -> bool:
    return bool(REMOVE_CALL_RE.search(ctx.text)) and _any(LOOP_RE, ctx.before("list_remove_window"))


@rule(
    "MUTABLE_COLLECTION_CONCERN",
    INFO,
    "quality",
    "Collecting to mutable List then modifying - consider immutable alternative",
    "Use .collect(Collectors.toUnmodifiableList()) or List.copyOf()",
)
def mutable_collection_concern(ctx: LineContext) -> bool:
    return bool(COLLECT_TO_LIST_RE.search(ctx.text)) and _any(
        MUTATION_CALL_RE, ctx.after("mutable_collection_window")
    )


@rule(
    "MISSING_TRANSACTIONAL",
    WARNING,
    "quality",
    "Public DB modification method without @Transactional",
    "Add @Transactional to ensure rollback on exception",
)
def missing_transactional(ctx: LineContext) -> bool:
    if not DB_MUTATION_METHOD_RE.search(ctx.text) or TRANSACTIONAL_RE.search(ctx.text):
        return False
    return not _any(TRANSACTIONAL_RE, ctx.before("transactional_lookback"))


@rule(
    "LAZY_LOADING_OUTSIDE_TX",
    WARNING,
    "performance",
    "Lazy loading outside transaction - LazyInitializationException",
    "Wrap in @Transactional or eagerly fetch with JOIN",
)
def lazy_loading_outside_tx(ctx: LineContext) -> bool:
    return bool(GET_CALL_RE.search(ctx.text)) and _any(LAZY_RE, ctx.before("lazy_window"))


@rule(
    "SPRING_BEAN_SCOPE",
    INFO,
    "quality",
    "Component may have mutable state - verify scope is appropriate",
    'Use @Scope("prototype") for stateful beans or make immutable',
)
def spring_bean_scope(ctx: LineContext) -> bool:
    """@Component with no @Scope and a non-final private field shortly after."""
    if not COMPONENT_RE.search(ctx.text) or SCOPE_RE.search(ctx.text):
        return False
    following = ctx.after("bean_scope_window")
    if _any(SCOPE_RE, following):
        return False
    return _any(MUTABLE_FIELD_RE, following)


@rule(
    "TRANSACTIONAL_ON_PRIVATE",
    WARNING,
    "quality",
    "@Transactional on non-public method - Spring proxy ignored",
    "Move to public method or use AspectJ mode",
)
def transactional_on_private(ctx: LineContext) -> bool:
    if not TRANSACTIONAL_RE.search(ctx.text):
        return False
    return not _any(PUBLIC_RE, ctx.here_and_after("transactional_window"))


@rule(
    "LARGE_ALLOCATION_IN_LOOP",
    WARNING,
    "performance",
    "Object allocation in loop - memory pressure and GC churn",
    "Consider reusing objects or moving allocation outside loop",
)
def large_allocation_in_loop(ctx: LineContext) -> bool:
    if _is_comment(ctx) or not NEW_OBJECT_RE.search(_code(ctx.text)):
        return False
    return _any(LOOP_RE, ctx.before("allocation_loop_window"))


@rule(
    "STRING_INTERN_MISUSE",
    WARNING,
    "performance",
    "String.intern() can cause string pool overflow",
    "Avoid intern() unless specifically needed for identity comparison",
)
def string_intern_misuse(ctx: LineContext) -> bool:
    return bool(INTERN_RE.search(ctx.text))


@rule(
    "WEAKREF_NULL_CHECK",
    WARNING,
    "quality",
    "WeakReference/SoftReference used without null checks",
    "Reference may be cleared by GC - always check for null",
)
def weakref_null_check(ctx: LineContext) -> bool:
    if IMPORT_RE.search(ctx.text) or not WEAKREF_RE.search(ctx.text):
        return False
    return not _any(NULL_COMPARE_RE, ctx.here_and_after("weakref_window"))


@rule(
    "UNNECESSARY_CLONING",
    INFO,
    "performance",
    "Object.clone() may be unnecessary - verify it's needed",
    "Consider copy constructors or defensive copying instead",
)
def unnecessary_cloning(ctx: LineContext) -> bool:
    return bool(CLONE_RE.search(ctx.text))


@rule(
    "SINGLETON_VIOLATION",
    WARNING,
    "quality",
    "Singleton INSTANCE is mutable - vulnerable to reflection",
    "Use final or return from getInstance() method",
)
def singleton_violation(ctx: LineContext) -> bool:
    return bool(SINGLETON_RE.search(ctx.text))


@rule(
    "HASHMAP_NULL_SAFETY",
    WARNING,
    "quality",
    "HashMap.get() can return null - no null check",
    "Add null check or use getOrDefault()",
)
def hashmap_null_safety(ctx: LineContext) -> bool:
    """Map lookup near a map declaration with no null check within ``map_null_check_window`` lines."""
    if not GET_CALL_RE.search(ctx.text) or GET_OR_DEFAULT_RE.search(ctx.text):
        return False
    if not _any(MAP_TYPE_RE, ctx.before("map_get_window")):
        return False
    return not _any(NOT_NULL_RE, ctx.here_and_after("map_null_check_window"))


@rule(
    "SIMPLEDATEFORMAT_SHARED",
    ERROR,
    "concurrency",
    "SimpleDateFormat is not thread-safe - do not make static",
    "Use DateTimeFormatter (Java 8+) or synchronize access",
)
def simpledateformat_shared(ctx: LineContext) -> bool:
    if IMPORT_RE.search(ctx.text):
        return False
    return bool(SIMPLE_DATE_FORMAT_RE.search(ctx.text)) and bool(SHARED_MODIFIER_RE.search(ctx.text))


@rule(
    "REGEX_DOS_RISK",
    WARNING,
    "security",
    "Complex regex may have catastrophic backtracking (ReDoS)",
    "Test regex performance or simplify pattern",
)
def regex_dos_risk(ctx: LineContext) -> bool:
    return bool(REGEX_API_RE.search(ctx.text)) and bool(BACKTRACKING_RE.search(ctx.text))


@rule(
    "XML_XXE_VULNERABILITY",
    ERROR,
    "security",
    "XML parsing without XXE protection - security vulnerability",
    'Disable external entities: setFeature("http://apache.org/xml/features/disallow-doctype-decl", true)',
)
def xml_xxe_vulnerability(ctx: LineContext) -> bool:
    if not XML_PARSER_RE.search(ctx.text):
        return False
    return not _any(XXE_GUARD_RE, ctx.here_and_after("xxe_window"))


@rule(
    "COMPARATOR_CONSISTENCY",
    WARNING,
    "quality",
    "Verify comparator is consistent with equals()",
    "compareTo() should follow same rules as equals() for TreeSet/TreeMap",
)
def comparator_consistency(ctx: LineContext) -> bool:
    return bool(COMPARATOR_RE.search(ctx.text))


@rule(
    "NUMBERFORMAT_SHARED",
    WARNING,
    "concurrency",
    "NumberFormat is not thread-safe - do not share",
    "Create new instance per thread or synchronize access",
)
def numberformat_shared(ctx: LineContext) -> bool:
    if IMPORT_RE.search(ctx.text):
        return False
    return bool(NUMBER_FORMAT_RE.search(ctx.text)) and bool(SHARED_MODIFIER_RE.search(ctx.text))


@rule(
    "COMMAND_INJECTION_RISK",
    ERROR,
    "security",
    "Command execution with string concatenation - shell injection",
    "Use array form: Runtime.exec(new String[]{...})",
)
def command_injection_risk(ctx: LineContext) -> bool:
    return bool(EXEC_RE.search(ctx.text)) and bool(DYNAMIC_STRING_RE.search(ctx.text))


@rule(
    "PATH_TRAVERSAL_RISK",
    ERROR,
    "security",
    "File access with user input - path traversal risk",
    "Validate and sanitize file paths, use canonical paths",
)
def path_traversal_risk(ctx: LineContext) -> bool:
    """File API call with user-supplied data on this or the next ``path_input_window`` lines."""
    if not FILE_ACCESS_RE.search(ctx.text):
        return False
    return any(USER_INPUT_RE.search(_code(line)) for line in ctx.here_and_after("path_input_window"))


@rule(
    "LDAP_INJECTION_RISK",
    ERROR,
    "security",
    "LDAP query with string concatenation - LDAP injection risk",
    "Use LDAP escape functions or parameterized queries",
)
def ldap_injection_risk(ctx: LineContext) -> bool:
    if IMPORT_RE.search(ctx.text) or not LDAP_RE.search(ctx.text):
        return False
    return bool(DYNAMIC_STRING_RE.search(ctx.text))


@rule(
    "INSECURE_RANDOM",
    ERROR,
    "security",
    "Random is predictable - use SecureRandom for security",
    "Replace with: new SecureRandom()",
)
def insecure_random(ctx: LineContext) -> bool:
    return bool(INSECURE_RANDOM_RE.search(ctx.text))


@rule(
    "WEAK_CRYPTOGRAPHY",
    ERROR,
    "security",
    "Weak cryptography algorithm detected",
    "Use SHA-256+, AES-256, or modern alternatives",
)
def weak_cryptography(ctx: LineContext) -> bool:
    return not _is_comment(ctx) and bool(WEAK_CRYPTO_RE.search(ctx.text))


@rule(
    "O_N_SQUARED_ALGORITHM",
    WARNING,
    "performance",
    "Linear collection search inside a loop - O(n^2) algorithm",
    "Use HashMap or HashSet for O(1) lookup",
)
def o_n_squared_algorithm(ctx: LineContext) -> bool:
    """contains()/indexOf() with a loop header on this line or within ``nested_loop_window`` lines above."""
    if not SEARCH_CALL_RE.search(ctx.text):
        return False
    return bool(LOOP_RE.search(ctx.text)) or _any(LOOP_RE, ctx.before("nested_loop_window"))


@rule(
    "INTEGER_OVERFLOW_RISK",
    WARNING,
    "quality",
    "Integer arithmetic may overflow - silent wraparound",
    "Check bounds or use long/BigInteger for large values",
)
def integer_overflow_risk(ctx: LineContext) -> bool:
    if FOR_RE.search(ctx.text) or _is_comment(ctx):
        return False
    code = _code(ctx.text)
    return bool(ARITHMETIC_RE.search(code)) and bool(INT_CONTEXT_RE.search(code))


@rule(
    "MODULO_NEGATIVE_CONCERN",
    INFO,
    "quality",
    "Modulo on negative numbers can return negative",
    "Be aware: -10 % 3 = -1, consider absolute value",
)
def modulo_negative_concern(ctx: LineContext) -> bool:
    return not _is_comment(ctx) and bool(MODULO_RE.search(_code(ctx.text)))


@rule(
    "INEFFICIENT_ALGORITHM",
    INFO,
    "performance",
    "Sorting inside loop - repeated sort of same data",
    "Move sort outside loop or use different approach",
)
def inefficient_algorithm(ctx: LineContext) -> bool:
    return bool(SORT_RE.search(ctx.text)) and _any(FOR_RE, ctx.before("sort_loop_window"))


@rule(
    "ASSERTIONS_IN_PRODUCTION",
    WARNING,
    "testing",
    "Assertions disabled by default in production (-ea flag)",
    "Use explicit if/throw or logging instead of assert",
)
def assertions_in_production(ctx: LineContext) -> bool:
    return bool(ASSERT_RE.search(ctx.text))


@rule(
    "FLAKY_TEST",
    WARNING,
    "testing",
    "Test using Thread.sleep() - flaky and slow",
    "Use CountDownLatch, Awaitility, or MockTime instead",
)
def flaky_test(ctx: LineContext) -> bool:
    return "Test" in ctx.file_name and bool(THREAD_SLEEP_RE.search(ctx.text))


@rule(
    "LOGGING_IN_FINALLY",
    WARNING,
    "quality",
    "Logging in finally block may suppress exceptions",
    "Use try-with-resources or log before finally",
)
def logging_in_finally(ctx: LineContext) -> bool:
    """finally block with a logging call in its first ``finally_window`` lines."""
    if not FINALLY_RE.search(_code(ctx.text)):
        return False
    return _any(LOG_CALL_RE, ctx.here_and_after("finally_window"))


@rule(
    "LOG_INJECTION_RISK",
    WARNING,
    "security",
    "User input logged directly - log injection attack vector",
    "Sanitize input: remove newlines and control characters",
)
def log_injection_risk(ctx: LineContext) -> bool:
    """Parameterized log call preceded by request or user data within ``log_injection_window`` lines."""
    if not LOG_WRITE_RE.search(ctx.text) or not LOG_ARGUMENT_RE.search(ctx.text):
        return False
    return _any(REQUEST_DATA_RE, ctx.before("log_injection_window"))


JAVA_RULES = (
    use_logging_framework,
    empty_catch_block,
    incomplete_todo,
    magic_number,
    missing_access_modifier,
    long_line,
    thread_sleep,
    hardcoded_secret,
    wildcard_import,
    missing_javadoc,
    nested_loops,
    sql_injection_risk,
    null_pointer_risk,
    hardcoded_database_url,
    resource_leak,
    log_level_misuse,
    test_coverage_hint,
    use_stream_api,
    generic_exception,
    thread_safety_risk,
    resource_management,
    performance_hotspot,
    high_complexity,
    unreachable_code,
    naming_convention,
    annotation_placement,
    api_design,
    throws_generic_exception,
    double_checked_locking,
    busy_wait_loop,
    threadlocal_memory_leak,
    concurrenthashmap_iteration,
    volatile_misuse,
    unsafe_reflection,
    unsafe_deserialization,
    missing_serialversionuid,
    stream_not_terminated,
    parallel_stream_overhead,
    iterator_modification,
    inefficient_list_operations,
    mutable_collection_concern,
    missing_transactional,
    lazy_loading_outside_tx,
    spring_bean_scope,
    transactional_on_private,
    large_allocation_in_loop,
    string_intern_misuse,
    weakref_null_check,
    unnecessary_cloning,
    singleton_violation,
    hashmap_null_safety,
    simpledateformat_shared,
    regex_dos_risk,
    xml_xxe_vulnerability,
    comparator_consistency,
    numberformat_shared,
    command_injection_risk,
    path_traversal_risk,
    ldap_injection_risk,
    insecure_random,
    weak_cryptography,
    o_n_squared_algorithm,
    integer_overflow_risk,
    modulo_negative_concern,
    inefficient_algorithm,
    assertions_in_production,
    flaky_test,
    logging_in_finally,
    log_injection_risk,
)


def build_java_catalog() -> RuleCatalog:
    return RuleCatalog(
        "java",
        JAVA_RULES,
        comment_policy=JAVA_COMMENT_POLICY,
        thresholds=JAVA_THRESHOLDS,
    )
