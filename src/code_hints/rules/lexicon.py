"""Per-language keyword tables for the performance and security rule families.

A rule family is written once and parameterised by a Lexicon; the lexicon only
carries spellings. Every marker is matched against lower-cased source text.
"""

import re
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Mapping, Pattern, Tuple

# Markers are grouped as alternatives of conjunctions: a group matches when all
# of its markers are present, the set matches when any group does.
MarkerGroups = Tuple[Tuple[str, ...], ...]

SQL_KEYWORDS = (
    "select ",
    "insert ",
    "update ",
    "delete ",
    "create ",
    "drop ",
    "alter ",
    "truncate ",
)

CREDENTIAL_TOKENS = (
    "password",
    "passwd",
    "pwd",
    "apikey",
    "api_key",
    "secret",
    "token",
    "credential",
    "auth",
    "private_key",
    "access_key",
)

SECURITY_CONTEXT_TOKENS = ("token", "session", "password", "salt", "key", "nonce")

# orderRepository.findById(, userDao.getUser(, repo.find_by_id(
REPOSITORY_CALL = re.compile(r"(?:repository|repo|dao)\s*\.\s*(?:find|get)\w*\s*\(")

LISTENER_ADD = ("addlistener", "addobserver", "subscribe", "add_listener", "add_observer")
LISTENER_REMOVE = ("removelistener", "removeobserver", "unsubscribe", "dispose", "remove_listener", "remove_observer")

DEFAULT_MESSAGES = {
    "n_plus_one_query": "N+1 Query detected - Use JOIN or batch loading",
    "inefficient_collection_ops": "Chained collection operations - Combine into a single pass",
    "listener_leak": "Memory leak risk - Listener not removed",
    "thread_leak": "Thread leak - Thread not properly terminated",
    "blocking_main_thread": "Blocking operation on main thread - Move to background",
    "large_allocation": "Large allocation ({size}) - Consider lazy initialization",
    "large_array_allocation": "Large array allocation ({size}) - Consider lazy initialization",
    "boxing_overhead": "Boxing overhead - Use primitive arrays for performance",
    "sql_injection": "SQL Injection - Use parameterized queries",
    "hardcoded_credentials": "Hardcoded credential - Use environment variables or secure vault",
    "path_traversal": "Path Traversal - Validate and normalize file paths",
    "insecure_random": "Insecure Random - Use a cryptographically secure random source",
    "command_injection": "Command Injection - Validate and sanitize command parameters",
    "xss": "XSS vulnerability - Escape HTML output",
}


@dataclass(frozen=True)
class Lexicon:
    """Spellings the rule families look for in one language."""

    language: str

    # Loops, for rules that look inside loop bodies when no tree is available
    loop_pattern: Pattern[str]
    # Calls whose lambda argument runs once per element
    iteration_calls: FrozenSet[str] = frozenset()

    # N+1 query
    query_markers: Tuple[str, ...] = ()

    # Chained collection operations
    chain_required: Tuple[str, ...] = ()
    chain_pairs: MarkerGroups = ()
    chain_ops: Tuple[str, ...] = ()
    chain_min_ops: int = 3
    lazy_markers: Tuple[str, ...] = ()

    # Leaks
    listener_add: Tuple[str, ...] = LISTENER_ADD
    listener_remove: Tuple[str, ...] = LISTENER_REMOVE
    thread_start: MarkerGroups = ()
    thread_stop: Tuple[str, ...] = ()

    # Blocking work on a latency-sensitive context
    ui_markers: Tuple[str, ...] = ()
    ui_names: FrozenSet[str] = frozenset()
    blocking_markers: Tuple[str, ...] = ()

    # Allocations; each pattern has a ``size`` group
    collection_allocation: Tuple[Pattern[str], ...] = ()
    array_allocation: Tuple[Pattern[str], ...] = ()

    # Boxed numerics
    boxed_types: Tuple[str, ...] = ()
    boxed_access: Tuple[str, ...] = ()

    # Security
    concat_markers: Tuple[str, ...] = ("+",)
    file_markers: Tuple[str, ...] = ()
    path_validation: Tuple[str, ...] = ()
    random_pattern: Pattern[str] = re.compile(r"(?!x)x")
    command_markers: Tuple[str, ...] = ()
    html_output: Tuple[str, ...] = ()
    external_input: Tuple[str, ...] = ()
    escaping_markers: Tuple[str, ...] = ()

    messages: Mapping[str, str] = field(default_factory=dict)

    def message(self, key: str, **values) -> str:
        template = self.messages.get(key, DEFAULT_MESSAGES[key])
        return template.format(**values) if values else template


JAVA = Lexicon(
    language="java",
    loop_pattern=re.compile(r"\b(?:for|while)\s*\(|\bdo\s*\{|\.foreach\s*\("),
    iteration_calls=frozenset({"forEach"}),
    query_markers=("query.execute", "statement.execute", "jdbctemplate.query", "entitymanager.find("),
    chain_required=(".stream()",),
    chain_pairs=((".filter(", ".map("), (".map(", ".collect(")),
    chain_ops=(".filter(", ".map(", ".sorted"),
    chain_min_ops=2,
    lazy_markers=(".parallelstream()",),
    thread_start=(("thread(", ".start()"),),
    thread_stop=(".join(", ".interrupt("),
    ui_markers=("invokelater", "invokeandwait", "runwriteaction", "actionperformed"),
    ui_names=frozenset({"actionPerformed", "run"}),
    blocking_markers=(
        "thread.sleep",
        "inputstream.read",
        "outputstream.write",
        "socket.",
        "httpclient",
        "files.read",
        "files.write",
    ),
    collection_allocation=(
        re.compile(
            r"new\s+(?:arraylist|hashmap|hashset|linkedhashmap|linkedlist|arraydeque|vector)"
            r"\s*(?:<[^()]*>)?\s*\(\s*(?P<size>\d[\d_]*)\s*\)"
        ),
    ),
    array_allocation=(
        re.compile(r"new\s+(?:int|long|double|float|short|byte|char|boolean)\s*\[\s*(?P<size>\d[\d_]*)\s*\]"),
    ),
    boxed_types=("list<integer>", "list<long>", "list<double>"),
    boxed_access=(".get(", ".add("),
    concat_markers=("+", "concat(", "string.format", "${"),
    file_markers=("file(", "files.", "paths.get"),
    path_validation=("normalize", "getcanonicalpath", "startswith"),
    random_pattern=re.compile(r"math\.random\s*\(\)|new\s+random\s*\("),
    command_markers=("runtime.getruntime().exec", "processbuilder"),
    html_output=("response.getwriter", "printwriter", "servletoutputstream", ".html"),
    external_input=("request.getparameter", "request.getheader"),
    escaping_markers=("htmlutils", "escapehtml", "encode"),
    messages={
        "inefficient_collection_ops": "Consider parallel stream for large collections",
        "sql_injection": "SQL Injection - Use PreparedStatement instead of string concatenation",
        "insecure_random": "Insecure Random - Use SecureRandom for cryptographic operations",
    },
)

KOTLIN = Lexicon(
    language="kotlin",
    loop_pattern=re.compile(r"\b(?:for|while)\s*\(|\.foreach\b|\brepeat\s*\("),
    iteration_calls=frozenset({"forEach", "map"}),
    query_markers=("query.execute", "statement.execute", "jdbctemplate.query"),
    chain_pairs=((".filter {", ".map {"), (".map {", ".sortedby")),
    chain_ops=(".filter", ".map", ".sorted", ".distinct"),
    chain_min_ops=3,
    lazy_markers=(".assequence()",),
    thread_start=(("globalscope.launch",), ("globalscope", "thread {")),
    thread_stop=(".join(", ".cancel("),
    ui_markers=("dispatchers.main", "runonuithread"),
    blocking_markers=(
        "thread.sleep",
        "inputstream",
        "outputstream",
        "httpclient",
        "file.read",
        "file.write",
        "runblocking",
    ),
    collection_allocation=(
        re.compile(
            r"(?:arraylist|hashmap|hashset|linkedhashmap|arraylistof|mutablelistof|hashsetof|hashmapof)"
            r"\s*(?:<[^()]*>)?\s*\(\s*(?P<size>\d[\d_]*)\s*\)"
        ),
    ),
    array_allocation=(
        re.compile(r"(?:intarray|longarray|doublearray|floatarray|bytearray)\s*\(\s*(?P<size>\d[\d_]*)\s*\)"),
    ),
    boxed_types=("list<int>", "list<long>", "list<double>"),
    boxed_access=("[", ".get("),
    concat_markers=("+", "${"),
    file_markers=("file(", "path(", "tofile"),
    path_validation=("normalize", "canonicalpath", "startswith"),
    random_pattern=re.compile(r"(?<!secure)random\s*\(\)|random\.next"),
    command_markers=("runtime.getruntime().exec", "processbuilder", '"sh"', '"bash"'),
    html_output=("response.writer", "respondtext", "html {"),
    external_input=("request.parameter", "call.receive", "request.header"),
    escaping_markers=("escapehtml", "encode", "sanitize"),
    messages={
        "inefficient_collection_ops": "Use sequence for chained operations on large collections",
        "listener_leak": "Memory leak risk - Subscription not disposed",
        "thread_leak": "Coroutine leak - Use structured concurrency instead of GlobalScope",
        "blocking_main_thread": "Blocking operation on main thread - Use withContext(Dispatchers.IO)",
        "boxing_overhead": "Boxing overhead - Use IntArray/LongArray for primitives",
        "sql_injection": "SQL Injection - Use parameterized queries or exposed/jooq DSL",
        "insecure_random": "Insecure Random - Use SecureRandom for cryptographic operations",
        "xss": "XSS vulnerability - Escape HTML output or use template engine",
    },
)

PYTHON = Lexicon(
    language="python",
    loop_pattern=re.compile(r"\bfor\b[^\n]*\bin\b|\bwhile\b"),
    query_markers=("cursor.execute", "session.query", "session.get(", ".objects.get(", ".objects.filter("),
    chain_pairs=(("filter(", "map("), ("map(", "sorted(")),
    chain_ops=("map(", "filter(", "sorted("),
    chain_min_ops=3,
    lazy_markers=("itertools.", "islice("),
    thread_start=(("thread(", ".start()"),),
    thread_stop=(".join(",),
    # Coroutines share the event loop thread
    ui_markers=("async def",),
    blocking_markers=(
        "time.sleep(",
        "requests.",
        "urllib.request",
        "socket.",
        "subprocess.run(",
        "open(",
    ),
    collection_allocation=(re.compile(r"\[[^\[\]]*\]\s*\*\s*(?P<size>\d[\d_]*)"),),
    array_allocation=(
        re.compile(r"(?:bytearray|(?:np|numpy)\.(?:zeros|ones|empty))\s*\(\s*(?P<size>\d[\d_]*)"),
    ),
    concat_markers=("+", "%", ".format(", 'f"', "f'"),
    file_markers=("open(", "path(", "os.path.join(", "send_file("),
    path_validation=("normpath", "realpath", ".resolve(", "startswith", "is_relative_to", "commonpath"),
    random_pattern=re.compile(
        r"\brandom\.(?:random|randint|randrange|choice|choices|getrandbits|sample|shuffle|uniform)\s*\("
    ),
    command_markers=("os.system(", "os.popen(", "subprocess.", "commands.getoutput("),
    html_output=("make_response(", "httpresponse(", "render_template_string(", "markup("),
    external_input=("request.args", "request.form", "request.get", "request.values", "request.cookies"),
    escaping_markers=("escape(", "bleach.", "sanitize"),
    messages={
        "inefficient_collection_ops": "Chained map/filter/sorted - Use a single comprehension or generator",
        "blocking_main_thread": "Blocking call inside coroutine - Use an async client or run_in_executor",
        "insecure_random": "Insecure Random - Use the secrets module for tokens and keys",
    },
)

JAVASCRIPT = Lexicon(
    language="javascript",
    loop_pattern=re.compile(r"\b(?:for|while)\s*\(|\bdo\s*\{|\.foreach\s*\(|\.map\s*\("),
    iteration_calls=frozenset({"forEach", "map"}),
    query_markers=("db.query(", "connection.query(", "pool.query(", ".findone(", ".findbypk("),
    chain_pairs=((".filter(", ".map("), (".map(", ".sort(")),
    chain_ops=(".filter(", ".map(", ".sort(", ".reduce("),
    chain_min_ops=3,
    listener_add=("addeventlistener(", ".subscribe(", "subscribe"),
    listener_remove=("removeeventlistener(", "unsubscribe", "dispose", ".off("),
    thread_start=(("setinterval(",),),
    thread_stop=("clearinterval(",),
    ui_markers=("async ", "addeventlistener("),
    blocking_markers=("readfilesync(", "writefilesync(", "execsync(", "spawnsync(", "atomics.wait("),
    collection_allocation=(
        re.compile(r"(?:new\s+array\s*\(|array\.from\s*\(\s*\{\s*length\s*:)\s*(?P<size>\d[\d_]*)"),
    ),
    array_allocation=(
        re.compile(
            r"new\s+(?:int8|uint8|uint8clamped|int16|uint16|int32|uint32|float32|float64|bigint64|biguint64)"
            r"array\s*\(\s*(?P<size>\d[\d_]*)\s*\)"
        ),
    ),
    concat_markers=("+", "${", ".concat("),
    file_markers=("fs.", "readfile", "createreadstream(", "path.join(", "sendfile("),
    path_validation=("path.normalize", "path.resolve", "startswith", "realpath"),
    random_pattern=re.compile(r"math\.random\s*\("),
    # child_process forms only; RegExp.prototype.exec is not a command
    command_markers=(
        "child_process.", "cp.exec(", "cp.spawn(", "execsync(", "spawnsync(", "execfile(", "execfilesync(",
    ),
    html_output=("innerhtml", "outerhtml", "document.write(", "insertadjacenthtml(", "res.send("),
    external_input=("req.query", "req.params", "req.body", "location.", "document.cookie", ".value"),
    escaping_markers=("escape", "encodeuricomponent(", "sanitize", "dompurify", "textcontent"),
    messages={
        "thread_leak": "Timer leak - setInterval without clearInterval",
        "blocking_main_thread": "Synchronous I/O on the event loop - Use the async API",
        "insecure_random": "Insecure Random - Use crypto.getRandomValues or crypto.randomUUID",
    },
)

TYPESCRIPT = replace(JAVASCRIPT, language="typescript")

LEXICONS: Dict[str, Lexicon] = {
    lexicon.language: lexicon
    for lexicon in (JAVA, KOTLIN, PYTHON, JAVASCRIPT, TYPESCRIPT)
}
