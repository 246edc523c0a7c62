import pytest

from review_scanner.scanners import analyze, default_registry
from review_scanner.scanners.engine import Analyzer
from review_scanner.scanners.java_rules import JAVA_THRESHOLDS


def java_ids(text: str, path: str = "src/main/Example.java") -> list[str]:
    return [item.rule_id for item in analyze(path, "java", text)]


def test_security_rules():
    assert "HARDCODED_SECRET" in java_ids('String password = "hunter2";')
    assert "SQL_INJECTION_RISK" in java_ids('String query = "SELECT * FROM users WHERE id = " + userId;')
    assert "SQL_INJECTION_RISK" not in java_ids('String query = "SELECT * FROM users WHERE id = ?";')
    assert "INSECURE_RANDOM" in java_ids("Random random = new Random();")
    assert "WEAK_CRYPTOGRAPHY" in java_ids('MessageDigest md = MessageDigest.getInstance("MD5");')
    assert "WEAK_CRYPTOGRAPHY" not in java_ids('String description = "details";')
    assert "HARDCODED_DATABASE_URL" in java_ids('String url = "jdbc:mysql://localhost:3306/app";')


def test_quality_rules():
    assert "WILDCARD_IMPORT" in java_ids("import java.util.*;")
    assert "EMPTY_CATCH_BLOCK" in java_ids("} catch (IOException e) {}")
    assert "GENERIC_EXCEPTION" in java_ids("} catch (Exception e) {")
    assert "THROWS_GENERIC_EXCEPTION" in java_ids("public void run() throws Exception {")
    assert "INCOMPLETE_TODO" in java_ids("// TODO")
    assert "INCOMPLETE_TODO" not in java_ids("// TODO: remove once the v2 client ships")


def test_magic_number_skips_constants():
    findings = analyze("A.java", "java", "int timeout = 5000;")
    magic = [item for item in findings if item.rule_id == "MAGIC_NUMBER"]

    assert len(magic) == 1
    assert magic[0].message.startswith("Magic number 5000")
    assert "MAGIC_NUMBER" not in java_ids("private static final int TIMEOUT = 5000;")


def test_long_line_message_and_threshold_override():
    text = 'String s = "' + "a" * 130 + '";'

    findings = [item for item in analyze("A.java", "java", text) if item.rule_id == "LONG_LINE"]
    assert len(findings) == 1
    assert "max 120" in findings[0].message

    registry = default_registry().configured(thresholds={"java": {"max_line_length": 200}})
    scan = Analyzer(registry).analyze("A.java", "java", text)
    assert "LONG_LINE" not in [item.rule_id for item in scan.findings]


def _resource_file(close_distance: int) -> str:
    lines = ["FileInputStream in = new FileInputStream(path);"]
    lines.extend([""] * (close_distance - 1))
    lines.append("in.close();")
    return "\n".join(lines)


def test_resource_leak_respects_window_size():
    window = JAVA_THRESHOLDS["resource_close_window"]

    beyond = analyze("A.java", "java", _resource_file(window + 1))
    within = analyze("A.java", "java", _resource_file(window - 1))

    assert any(item.rule_id == "RESOURCE_LEAK" and item.line_number == 1 for item in beyond)
    assert not any(item.rule_id == "RESOURCE_LEAK" for item in within)


def test_unreachable_code_stops_at_block_end():
    assert "UNREACHABLE_CODE" in java_ids('return total;\nlog.info("done");')
    assert "UNREACHABLE_CODE" not in java_ids("return total;\n}\npublic int size() {")


def test_nested_loops_reported_on_inner_loop():
    text = "for (int i = 0; i < n; i++) {\n    for (int j = 0; j < n; j++) {"

    nested = [item for item in analyze("A.java", "java", text) if item.rule_id == "NESTED_LOOPS"]

    assert [item.line_number for item in nested] == [2]


def test_flaky_test_is_scoped_to_test_files():
    assert "FLAKY_TEST" in java_ids("Thread.sleep(100);", path="src/test/OrderServiceTest.java")
    assert "FLAKY_TEST" not in java_ids("Thread.sleep(100);", path="src/main/OrderService.java")
    assert "THREAD_SLEEP" in java_ids("Thread.sleep(100);", path="src/main/OrderService.java")


def test_missing_javadoc_looks_at_previous_line():
    undocumented = "class A {\n    public String getName() {"
    documented = "class A {\n    /** Returns the name. */\n    public String getName() {"

    assert any(
        item.rule_id == "MISSING_JAVADOC" and item.line_number == 2
        for item in analyze("A.java", "java", undocumented)
    )
    assert "MISSING_JAVADOC" not in java_ids(documented)


def test_concurrency_rules():
    assert "SIMPLEDATEFORMAT_SHARED" in java_ids(
        'private static SimpleDateFormat FORMAT = new SimpleDateFormat("yyyy");'
    )
    assert "THREADLOCAL_MEMORY_LEAK" in java_ids(
        "private static final ThreadLocal<Context> CURRENT = new ThreadLocal<>();"
    )
    locking = (
        "if (instance == null) {\n"
        "    synchronized (Registry.class) {\n"
        "        if (instance == null) {"
    )
    assert "DOUBLE_CHECKED_LOCKING" in java_ids(locking)


def _spaced(first: str, last: str, distance: int) -> str:
    return "\n".join([first, *[""] * (distance - 1), last])


def test_declaration_and_null_rules():
    assert "MISSING_ACCESS_MODIFIER" in java_ids("class Helper {")
    assert "MISSING_ACCESS_MODIFIER" not in java_ids("public class Helper {")
    assert "NULL_POINTER_RISK" in java_ids("String name = user.toString();")
    assert "NULL_POINTER_RISK" not in java_ids("if (user != null) {\n    String name = user.toString();")
    assert "NULL_POINTER_RISK" not in java_ids('boolean admin = "admin".equals(role);')
    assert "HARDCODED_DATABASE_URL" not in java_ids('String url = config.get("db.url");')
    assert "THREAD_SAFETY_RISK" in java_ids("private static int counter = 0;")
    assert "THREAD_SAFETY_RISK" not in java_ids("private static final int LIMIT = 10;")
    assert "SINGLETON_VIOLATION" in java_ids("public static Registry INSTANCE = new Registry();")
    assert "SINGLETON_VIOLATION" not in java_ids("public static final Registry INSTANCE = new Registry();")


def test_method_shape_rules():
    assert "TEST_COVERAGE_HINT" in java_ids("public int score(int a, int b) {\n    return a > 0 && b > 0 ? a : b;")
    assert "TEST_COVERAGE_HINT" not in java_ids("public int size() {\n    return items.size();")
    assert "API_DESIGN" in java_ids("public Date parseDate(String value) {")
    assert "API_DESIGN" not in java_ids("public Date toDate(String value) {")
    assert "ANNOTATION_PLACEMENT" in java_ids("@Override\nvoid run() {")
    assert "ANNOTATION_PLACEMENT" not in java_ids("@Override\npublic void run() {")
    assert "MISSING_TRANSACTIONAL" in java_ids("public void updateOrder(Order order) {")
    assert "MISSING_TRANSACTIONAL" not in java_ids("@Transactional\npublic void updateOrder(Order order) {")
    assert "TRANSACTIONAL_ON_PRIVATE" in java_ids("@Transactional\nprivate void save(Order order) {")
    assert "TRANSACTIONAL_ON_PRIVATE" not in java_ids("@Transactional\npublic void save(Order order) {")


def test_complexity_and_naming():
    findings = [item for item in analyze("A.java", "java", "if (a && b || c && d) {") if item.rule_id == "HIGH_COMPLEXITY"]
    assert len(findings) == 1
    assert findings[0].message == "Complex conditional logic detected (3 logical operators)"
    assert "HIGH_COMPLEXITY" not in java_ids("if (a && b) {")
    assert "NAMING_CONVENTION" in java_ids("int user_count = 0;")
    assert "NAMING_CONVENTION" not in java_ids("int userCount = 0;")
    assert "NAMING_CONVENTION" not in java_ids('String s = "user_count = 1";')


def test_loop_rules():
    assert "USE_STREAM_API" in java_ids("for (int i = 0; i < items.size(); i++) {\n    result.add(items.get(i));")
    assert "USE_STREAM_API" not in java_ids("for (int i = 0; i < 10; i++) {\n    total += i;")
    assert "PERFORMANCE_HOTSPOT" in java_ids('for (String item : items) {\n    result += "," + item;')
    assert "PERFORMANCE_HOTSPOT" not in java_ids('String label = "a" + name;')
    assert "INEFFICIENT_LIST_OPERATIONS" in java_ids("for (Item item : copy) {\n    items.remove(item);")
    assert "INEFFICIENT_LIST_OPERATIONS" not in java_ids("items.remove(item);")
    assert "O_N_SQUARED_ALGORITHM" in java_ids("for (String id : ids) {\n    if (seen.contains(id)) {")
    assert "O_N_SQUARED_ALGORITHM" not in java_ids("if (seen.contains(id)) {")
    assert "INEFFICIENT_ALGORITHM" in java_ids("for (Batch batch : batches) {\n    Collections.sort(batch.items());")
    assert "INEFFICIENT_ALGORITHM" not in java_ids("Collections.sort(items);")
    assert "LARGE_ALLOCATION_IN_LOOP" in java_ids("for (Order order : orders) {\n    Report report = new Report(order);")
    assert "LARGE_ALLOCATION_IN_LOOP" not in java_ids("Report report = new Report(order);")
    assert "NESTED_LOOPS" not in java_ids("for (Order order : orders) {")


def test_iterator_modification_allows_iterator_remove():
    head = "Iterator<Item> it = items.iterator();\nwhile (it.hasNext()) {\n"

    assert "ITERATOR_MODIFICATION" in java_ids(head + "    items.remove(it.next());")
    assert "ITERATOR_MODIFICATION" not in java_ids(head + "    it.remove();")


def test_resource_and_concurrency_rules():
    assert "RESOURCE_MANAGEMENT" in java_ids("int port = 80;\nSocket socket = new Socket(host, port);")
    assert "RESOURCE_MANAGEMENT" not in java_ids("try (Socket socket = new Socket(host, port)) {")
    assert "BUSY_WAIT_LOOP" in java_ids("while (!ready) {\n    Thread.sleep(10);")
    assert "BUSY_WAIT_LOOP" not in java_ids("while (!ready) {\n    ready = poll();")
    assert "DOUBLE_CHECKED_LOCKING" not in java_ids("if (instance == null) {\n    instance = new Registry();")
    assert "VOLATILE_MISUSE" in java_ids("private volatile List<String> names;")
    assert "VOLATILE_MISUSE" not in java_ids("private volatile boolean running;")
    assert "SIMPLEDATEFORMAT_SHARED" not in java_ids('SimpleDateFormat format = new SimpleDateFormat("yyyy");')
    assert "NUMBERFORMAT_SHARED" in java_ids("private static final NumberFormat FORMAT = NumberFormat.getInstance();")
    assert "NUMBERFORMAT_SHARED" not in java_ids("NumberFormat format = NumberFormat.getInstance();")
    assert "CONCURRENTHASHMAP_ITERATION" in java_ids(
        "Map<String, Integer> counts = new ConcurrentHashMap<>();\n"
        "Iterator<String> keys = counts.keySet().iterator();"
    )
    assert "CONCURRENTHASHMAP_ITERATION" not in java_ids(
        "Map<String, Integer> counts = new HashMap<>();\n"
        "Iterator<String> keys = counts.keySet().iterator();"
    )


def test_stream_and_collection_rules():
    assert "STREAM_NOT_TERMINATED" in java_ids("Stream<String> names = items.stream();")
    assert "STREAM_NOT_TERMINATED" not in java_ids(
        "List<String> names = items.stream().map(Item::name).collect(Collectors.toList());"
    )
    assert "STREAM_NOT_TERMINATED" not in java_ids("items.stream()\n    .map(Item::name)")
    assert "PARALLEL_STREAM_OVERHEAD" in java_ids("items.parallelStream().forEach(this::handle);")
    assert "PARALLEL_STREAM_OVERHEAD" not in java_ids("items.stream().forEach(this::handle);")
    collected = "List<String> names = items.stream().map(Item::name).collect(Collectors.toList());\n"
    assert "MUTABLE_COLLECTION_CONCERN" in java_ids(collected + 'names.add("extra");')
    assert "MUTABLE_COLLECTION_CONCERN" not in java_ids(collected + "return names;")
    assert "UNNECESSARY_CLONING" in java_ids("int[] copy = values.clone();")
    assert "UNNECESSARY_CLONING" not in java_ids("int[] copy = Arrays.copyOf(values, values.length);")
    assert "STRING_INTERN_MISUSE" in java_ids("String key = name.intern();")
    assert "STRING_INTERN_MISUSE" not in java_ids("String key = name.trim();")
    assert "COMPARATOR_CONSISTENCY" in java_ids("Comparator<User> byName = (a, b) -> compare(a, b);")
    assert "COMPARATOR_CONSISTENCY" not in java_ids("Comparator<User> byName = Comparator.comparing(User::getName);")


def test_framework_rules():
    assert "LAZY_LOADING_OUTSIDE_TX" in java_ids(
        "@OneToMany(fetch = FetchType.LAZY)\nprivate List<Item> items;\nItem first = items.get(0);"
    )
    assert "LAZY_LOADING_OUTSIDE_TX" not in java_ids("Item first = items.get(0);")
    field = "    private Map<String, String> entries = new HashMap<>();"
    assert "SPRING_BEAN_SCOPE" in java_ids("@Component\npublic class Cache {\n" + field)
    assert "SPRING_BEAN_SCOPE" not in java_ids('@Component\n@Scope("prototype")\npublic class Cache {\n' + field)
    assert "SPRING_BEAN_SCOPE" not in java_ids(
        "@Component\npublic class Cache {\n    private final Map<String, String> entries = new HashMap<>();"
    )
    assert "LOG_LEVEL_MISUSE" in java_ids('log.info("request duration " + elapsed);')
    assert "LOG_LEVEL_MISUSE" not in java_ids('log.info("user created");')
    assert "LOGGING_IN_FINALLY" in java_ids('} finally {\n    log.info("closing");')
    assert "LOGGING_IN_FINALLY" not in java_ids("} finally {\n    stream.close();")
    assert "ASSERTIONS_IN_PRODUCTION" in java_ids("assert count > 0;")
    assert "ASSERTIONS_IN_PRODUCTION" not in java_ids("assertEquals(1, count);")


def test_injection_rules():
    assert "COMMAND_INJECTION_RISK" in java_ids('Runtime.getRuntime().exec("ping " + host);')
    assert "COMMAND_INJECTION_RISK" not in java_ids("Runtime.getRuntime().exec(command);")
    assert "PATH_TRAVERSAL_RISK" in java_ids('File file = new File(baseDir, request.getParameter("name"));')
    assert "PATH_TRAVERSAL_RISK" not in java_ids('File file = new File(baseDir, "config.yml");')
    assert "LDAP_INJECTION_RISK" in java_ids('String ldapFilter = "(uid=" + username + ")";')
    assert "LDAP_INJECTION_RISK" not in java_ids("String ldapFilter = LdapEncoder.filterEncode(username);")
    request = 'String user = request.getParameter("user");\n'
    assert "LOG_INJECTION_RISK" in java_ids(request + 'log.info("Login attempt for " + user);')
    assert "LOG_INJECTION_RISK" not in java_ids(request + 'log.info("Login attempt");')
    assert "LOG_INJECTION_RISK" not in java_ids('log.info("Login attempt for {}", user);')
    assert "REGEX_DOS_RISK" in java_ids('Pattern p = Pattern.compile("(a+)+");')
    assert "REGEX_DOS_RISK" not in java_ids('Pattern p = Pattern.compile("[a-z]+");')
    assert "INSECURE_RANDOM" not in java_ids("SecureRandom random = new SecureRandom();")
    assert "UNSAFE_REFLECTION" in java_ids("field.setAccessible(true);")
    assert "UNSAFE_REFLECTION" not in java_ids("field.setAccessible(false);")


def test_guarded_declarations():
    deserialize = "ObjectInputStream in = new ObjectInputStream(stream);"
    assert "UNSAFE_DESERIALIZATION" in java_ids(deserialize)
    assert "UNSAFE_DESERIALIZATION" not in java_ids(deserialize + "\nin.setObjectInputFilter(filter);")
    parser = "DocumentBuilderFactory factory = DocumentBuilderFactory.newInstance();"
    assert "XML_XXE_VULNERABILITY" in java_ids(parser)
    assert "XML_XXE_VULNERABILITY" not in java_ids(parser + "\nfactory.setFeature(DISALLOW_DOCTYPE, true);")
    serializable = "public class Order implements Serializable {"
    assert "MISSING_SERIALVERSIONUID" in java_ids(serializable + "\n    private String id;")
    assert "MISSING_SERIALVERSIONUID" not in java_ids(
        serializable + "\n    private static final long serialVersionUID = 1L;"
    )
    reference = "WeakReference<Cache> ref = new WeakReference<>(cache);"
    assert "WEAKREF_NULL_CHECK" in java_ids(reference + "\nref.get().clear();")
    assert "WEAKREF_NULL_CHECK" not in java_ids(reference + "\nif (ref.get() != null) {")
    assert "WEAKREF_NULL_CHECK" not in java_ids("import java.lang.ref.WeakReference;")
    assert "THREADLOCAL_MEMORY_LEAK" not in java_ids(
        "private static final ThreadLocal<Context> CURRENT = new ThreadLocal<>();\nCURRENT.remove();"
    )


# rule on the first line, a guard on a later line suppresses it
GUARDED_WINDOWS = [
    (
        "UNSAFE_DESERIALIZATION",
        "deserialization_window",
        "ObjectInputStream in = new ObjectInputStream(stream);",
        "in.setObjectInputFilter(filter);",
    ),
    (
        "XML_XXE_VULNERABILITY",
        "xxe_window",
        "DocumentBuilderFactory factory = DocumentBuilderFactory.newInstance();",
        "factory.setFeature(DISALLOW_DOCTYPE, true);",
    ),
    (
        "THREADLOCAL_MEMORY_LEAK",
        "threadlocal_window",
        "private static final ThreadLocal<Context> CURRENT = new ThreadLocal<>();",
        "CURRENT.remove();",
    ),
    (
        "MISSING_SERIALVERSIONUID",
        "serial_uid_window",
        "public class Order implements Serializable {",
        "private static final long serialVersionUID = 1L;",
    ),
    (
        "WEAKREF_NULL_CHECK",
        "weakref_window",
        "WeakReference<Cache> ref = new WeakReference<>(cache);",
        "if (ref.get() != null) {",
    ),
]

# context on the first line makes the rule fire on the last line
CONTEXT_WINDOWS = [
    ("NESTED_LOOPS", "nested_loop_window", "for (Order order : orders) {", "for (Item item : order.items()) {"),
    (
        "LOG_INJECTION_RISK",
        "log_injection_window",
        'String user = request.getParameter("user");',
        'log.info("Login attempt for " + user);',
    ),
    (
        "LARGE_ALLOCATION_IN_LOOP",
        "allocation_loop_window",
        "for (Order order : orders) {",
        "Report report = new Report(order);",
    ),
    ("PERFORMANCE_HOTSPOT", "loop_window", "for (String item : items) {", 'line += item + ",";'),
    (
        "CONCURRENTHASHMAP_ITERATION",
        "iteration_window",
        "Map<String, Integer> counts = new ConcurrentHashMap<>();",
        "Iterator<String> keys = counts.keySet().iterator();",
    ),
    ("LAZY_LOADING_OUTSIDE_TX", "lazy_window", "@OneToMany(fetch = FetchType.LAZY)", "Item first = items.get(0);"),
]


@pytest.mark.parametrize("rule_id, window, first, last", GUARDED_WINDOWS)
def test_guard_counts_only_inside_window(rule_id, window, first, last):
    size = JAVA_THRESHOLDS[window]

    assert rule_id not in java_ids(_spaced(first, last, size))
    assert rule_id in java_ids(_spaced(first, last, size + 1))


@pytest.mark.parametrize("rule_id, window, first, last", CONTEXT_WINDOWS)
def test_context_counts_only_inside_window(rule_id, window, first, last):
    size = JAVA_THRESHOLDS[window]

    assert rule_id in java_ids(_spaced(first, last, size))
    assert rule_id not in java_ids(_spaced(first, last, size + 1))


def test_path_input_window_looks_ahead():
    access = "File file = new File(baseDir, name);"
    source = 'String name = request.getParameter("file");'
    size = JAVA_THRESHOLDS["path_input_window"]

    assert "PATH_TRAVERSAL_RISK" in java_ids(_spaced(access, source, size))
    assert "PATH_TRAVERSAL_RISK" not in java_ids(_spaced(access, source, size + 1))


def test_map_null_check_window_is_configurable():
    text = "Map<String, User> users = new HashMap<>();\nUser user = users.get(id);\nlog.debug(id);\nif (user != null) {"

    assert "HASHMAP_NULL_SAFETY" in java_ids(text)
    assert "HASHMAP_NULL_SAFETY" not in java_ids(
        "Map<String, User> users = new HashMap<>();\nUser user = users.get(id);\nif (user != null) {"
    )
    registry = default_registry().configured(thresholds={"java": {"map_null_check_window": 2}})
    scan = Analyzer(registry).analyze("A.java", "java", text)
    assert "HASHMAP_NULL_SAFETY" not in [item.rule_id for item in scan.findings]
