"""Pattern rule table and the line-oriented rule engine.

Usage:
    engine = RuleEngine()                         # default table
    engine = RuleEngine.from_config(config)       # table filtered by config
    issues = engine.scan("src/app.ts", content, next_id)

Adding a rule is adding one Rule(...) entry to DEFAULT_RULES. Each rule may
be scoped to a set of languages; an empty set applies everywhere.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable

from code_guardian.languages import detect_language
from code_guardian.models import Category, Language, ReviewIssue, Severity

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINE_LENGTH = 1000

_JS = frozenset({Language.JAVASCRIPT, Language.TYPESCRIPT})
_TS = frozenset({Language.TYPESCRIPT})
_PY = frozenset({Language.PYTHON})
_GO = frozenset({Language.GO})
_RS = frozenset({Language.RUST})
_BRACES = _JS | {Language.JAVA, Language.C, Language.CPP}


@dataclass(frozen=True)
class Rule:
    id: str
    pattern: str
    message: str
    severity: Severity
    category: Category
    flags: int = re.IGNORECASE
    languages: frozenset[Language] = frozenset()

    def applies_to(self, language: Language) -> bool:
        return not self.languages or language in self.languages


_C, _W, _I = Severity.CRITICAL, Severity.WARNING, Severity.IMPROVEMENT


# ---------------------------------------------------------------------------
# Default rule table
# ---------------------------------------------------------------------------

SECURITY_RULES = (
    Rule("SEC001", r"password\s*=\s*[\"'`][^\"'`]+[\"'`]",       "Hardcoded password detected",      _C, Category.SECURITY),
    Rule("SEC002", r"api[_-]?key\s*=\s*[\"'`][^\"'`]+[\"'`]",     "Hardcoded API key detected",       _C, Category.SECURITY),
    Rule("SEC003", r"secret[_-]?key\s*=\s*[\"'`][^\"'`]+[\"'`]",  "Hardcoded secret key detected",    _C, Category.SECURITY),
    Rule("SEC004", r"token\s*=\s*[\"'`][^\"'`]+[\"'`]",           "Hardcoded token detected",         _C, Category.SECURITY),
    Rule("SEC005", r"\beval\s*\(",                                "eval() usage detected - potential security risk", _C, Category.SECURITY),
    Rule("SEC006", r"new\s+Function\s*\(",                        "Function constructor usage - security risk",      _C, Category.SECURITY, languages=_JS),
    Rule("SEC007", r"dangerouslySetInnerHTML",                    "dangerouslySetInnerHTML detected - XSS risk",     _C, Category.SECURITY, languages=_JS),
    Rule("SEC008", r"\.innerHTML\s*=(?!=)",                       "innerHTML assignment - XSS vulnerability",        _C, Category.SECURITY, languages=_JS),
    Rule("SEC009", r"document\.write\s*\(",                       "document.write() usage - XSS risk",               _C, Category.SECURITY, languages=_JS),
    Rule("SEC010", r"process\.env\.[A-Z_]+",                      "Environment variable access detected",            _W, Category.SECURITY, languages=_JS),
    Rule("SEC011", r"child_process",                              "Child process usage detected - security consideration", _W, Category.SECURITY, languages=_JS),
    Rule("SEC012", r"child_process.*\.exec\s*\(|execSync\s*\(|execFile\s*\(|\bos\.system\s*\(|shell\s*=\s*True",
         "Shell command execution detected - security risk", _C, Category.SECURITY),
    Rule("SEC013", r"createHash\s*\(\s*[\"'`]md5[\"'`]|hashlib\.md5\s*\(",   "MD5 hash usage - weak cryptographic algorithm",  _W, Category.SECURITY),
    Rule("SEC014", r"createHash\s*\(\s*[\"'`]sha1[\"'`]|hashlib\.sha1\s*\(", "SHA1 hash usage - weak cryptographic algorithm", _W, Category.SECURITY),
    Rule("SEC015", r"Math\.random\s*\(\)",                        "Math.random() usage - not cryptographically secure", _W, Category.SECURITY, languages=_JS),
    Rule("SEC016", r"\bpickle\.loads?\s*\(",                      "Unsafe deserialization with pickle",              _C, Category.SECURITY, languages=_PY),
    Rule("SEC017", r"\byaml\.load\s*\((?![^)]*Loader)",           "yaml.load without a safe Loader",                 _W, Category.SECURITY, languages=_PY),
    Rule("SEC018", r"verify\s*=\s*False",                         "TLS certificate verification disabled",           _W, Category.SECURITY, languages=_PY),
    Rule("SEC019", r"private[_-]?key\s*=\s*[\"'`]|-----BEGIN (?:[A-Z]+ )*PRIVATE KEY-----", "Hardcoded private key detected", _C, Category.SECURITY),
    Rule("SEC020", r"client[_-]?secret\s*=\s*[\"'`][^\"'`]+[\"'`]", "Hardcoded client secret detected",           _C, Category.SECURITY),
    Rule("SEC021", r"jwt[_-]?secret\s*=\s*[\"'`][^\"'`]+[\"'`]",    "Hardcoded JWT secret detected",              _C, Category.SECURITY),
    Rule("SEC022", r"(?:database[_-]?url|connection[_-]?string)\s*=\s*[\"'`][^\"'`]+[\"'`]",
         "Hardcoded connection string detected", _C, Category.SECURITY),
    Rule("SEC023", r"[\"'`](?:http|ftp)://[^\s\"'`]+[\"'`]",        "Hardcoded URL detected - potential security risk", _W, Category.SECURITY),
    Rule("SEC024", r"\bfs\.readFile\s*\(",                         "File system access detected",                 _I, Category.SECURITY, languages=_JS),
    Rule("SEC025", r"\bfs\.(?:writeFile|appendFile)\s*\(",         "File system write detected - security consideration", _I, Category.SECURITY, languages=_JS),
    Rule("SEC026", r"\blocalStorage\.setItem\s*\(",                "localStorage usage - sensitive data exposure risk",   _W, Category.SECURITY, languages=_JS),
    Rule("SEC027", r"\bsessionStorage\.setItem\s*\(",              "sessionStorage usage - sensitive data exposure risk", _W, Category.SECURITY, languages=_JS),
    Rule("SEC028", r"document\.cookie\s*=(?!=)",                   "Cookie manipulation detected - security risk",       _W, Category.SECURITY, languages=_JS),
    Rule("SEC029", r"\.outerHTML\s*=(?!=)",                        "outerHTML assignment - XSS vulnerability",           _C, Category.SECURITY, languages=_JS),
    Rule("SEC030", r"\bset(?:Timeout|Interval)\s*\(\s*[\"'`]",     "Timer with string argument - code injection risk",   _C, Category.SECURITY, languages=_JS),
    Rule("SEC031", r"\b(?:bcrypt\.(?:hashSync|genSaltSync)|crypto\.(?:pbkdf2Sync|scryptSync))\s*\(",
         "Synchronous password hashing - blocks the event loop", _W, Category.SECURITY, languages=_JS),
)

PERFORMANCE_RULES = (
    Rule("PERF001", r"setInterval\s*\(",                            "setInterval usage detected - ensure cleanup",        _W, Category.PERFORMANCE, languages=_JS),
    Rule("PERF002", r"\.map\([^)]*\)\.filter\([^)]*\)\.map\(",      "Multiple map/filter chains - can be optimized",      _I, Category.PERFORMANCE, languages=_JS),
    Rule("PERF003", r"for\s*\([^)]*\)\s*\{[^}]*\.push\(",           "Loop with push - consider using map or reduce",      _I, Category.PERFORMANCE, languages=_JS),
    Rule("PERF004", r"addEventListener\s*\(",                       "Event listener without cleanup - potential memory leak", _W, Category.PERFORMANCE, languages=_JS),
    Rule("PERF005", r"document\.(?:getElementById|querySelector)\s*\(", "Repeated DOM queries - consider caching",        _I, Category.PERFORMANCE, languages=_JS),
    Rule("PERF006", r"\.forEach\s*\(\s*async\s+",                   "async forEach - consider Promise.all or for...of",   _W, Category.PERFORMANCE, languages=_JS),
    Rule("PERF007", r"JSON\.parse\s*\(\s*JSON\.stringify\s*\(",     "JSON.parse(JSON.stringify()) - deep copy anti-pattern", _W, Category.PERFORMANCE, languages=_JS),
    Rule("PERF008", r"\bin\s+range\s*\(\s*len\s*\(",                "range(len()) loop - iterate directly or use enumerate", _I, Category.PERFORMANCE, languages=_PY),
    Rule("PERF009", r"\.readlines\s*\(\s*\)",                       "readlines() loads the whole file - iterate the file object", _I, Category.PERFORMANCE, languages=_PY),
    Rule("PERF010", r"\brequestAnimationFrame\s*\(",                "requestAnimationFrame usage - ensure cancelAnimationFrame cleanup", _I, Category.PERFORMANCE, languages=_JS),
    Rule("PERF011", r"\bsetTimeout\s*\([^,]*,\s*0\s*\)",            "setTimeout with 0 delay - consider requestIdleCallback", _I, Category.PERFORMANCE, languages=_JS),
    Rule("PERF012", r"\bsetImmediate\s*\(|process\.nextTick\s*\(",  "setImmediate/nextTick usage - consider queueMicrotask", _I, Category.PERFORMANCE, languages=_JS),
    Rule("PERF013", r"new\s+Date\s*\(\s*\)\s*\.getTime\s*\(\s*\)",  "Date.now() is more efficient than new Date().getTime()", _I, Category.PERFORMANCE, languages=_JS),
    Rule("PERF014", r"Array\.prototype\.slice\.call\s*\(",          "Use Array.from() instead of Array.prototype.slice.call()", _I, Category.PERFORMANCE, languages=_JS),
    Rule("PERF015", r"Object\.(?:keys|values)\s*\([^)]*\)\.forEach\s*\(", "Object.keys().forEach - consider for...of over Object.entries", _I, Category.PERFORMANCE, languages=_JS),
    Rule("PERF016", r"\bwhile\s*\(\s*true\s*\)|\bfor\s*\(\s*;\s*;\s*\)", "Infinite loop detected - ensure proper exit condition", _C, Category.PERFORMANCE, languages=_BRACES),
    Rule("PERF017", r"\.sort\s*\([^)]*\)\s*\.slice\s*\(",           "Sort then slice - inefficient for large arrays",     _I, Category.PERFORMANCE, languages=_JS),
    Rule("PERF018", r"\.concat\s*\([^)]*\)\s*\.concat\s*\(",        "Multiple concat calls - consider spread operator",   _I, Category.PERFORMANCE, languages=_JS),
    Rule("PERF019", r"JSON\.stringify\s*\([^,)]*,\s*null\s*,\s*\d+\s*\)", "JSON.stringify with indent - performance impact", _W, Category.PERFORMANCE, languages=_JS),
)

CODE_QUALITY_RULES = (
    Rule("CQ001", r"console\.(?:log|warn|error|debug)",   "Console statement found - remove in production", _I, Category.CODE_QUALITY, languages=_JS),
    Rule("CQ002", r"\bvar\s+\w+",                         "var keyword used - prefer const or let",         _I, Category.CODE_QUALITY, languages=_JS),
    Rule("CQ003", r"(?<![=!])==(?!=)\s*[\"'`]",           "Use === instead of == for strict equality",      _I, Category.CODE_QUALITY, languages=_JS),
    Rule("CQ004", r"!=(?!=)\s*[\"'`]",                    "Use !== instead of != for strict inequality",    _I, Category.CODE_QUALITY, languages=_JS),
    Rule("CQ005", r"\bdebugger\b",                        "Debugger statement found - remove in production", _I, Category.CODE_QUALITY, languages=_JS),
    Rule("CQ006", r"\b(?:TODO|FIXME|HACK|XXX)\b",         "Temporary code marker detected - should be addressed", _I, Category.CODE_QUALITY, flags=0),
    Rule("CQ007", r"@deprecated",                         "Deprecated code detected - should be removed",   _I, Category.CODE_QUALITY),
    Rule("CQ008", r"@ts-ignore",                          "TypeScript ignore directive found",              _I, Category.CODE_QUALITY, languages=_TS),
    Rule("CQ009", r"\bas\s+any\b",                        "Type assertion to any detected",                 _I, Category.CODE_QUALITY, languages=_TS),
    Rule("CQ010", r"\balert\s*\(",                        "alert() usage - use proper error handling",      _W, Category.CODE_QUALITY, languages=_JS),
    Rule("CQ011", r"^\s*from\s+\S+\s+import\s+\*",        "Wildcard import - import names explicitly",      _I, Category.CODE_QUALITY, languages=_PY),
    Rule("CQ012", r"(?<![\w.$])confirm\s*\(",             "confirm() usage - use proper UI components",     _W, Category.CODE_QUALITY, languages=_JS),
    Rule("CQ013", r"(?<![\w.$])prompt\s*\(",              "prompt() usage - use proper UI components",      _W, Category.CODE_QUALITY, languages=_JS),
    Rule("CQ014", r";[ \t]*;[ \t]*$",                     "Double semicolon detected",                      _I, Category.CODE_QUALITY, languages=_JS),
    Rule("CQ015", r"^\s*if\s*\([^()]*\)\s*;",             "Empty if statement with semicolon",              _W, Category.CODE_QUALITY, languages=_BRACES),
    Rule("CQ016", r"^\s*for\s*\([^()]*\)\s*;",            "Empty for loop with semicolon",                  _W, Category.CODE_QUALITY, languages=_BRACES),
    Rule("CQ017", r"\btry\s*\{\s*\}",                     "Empty try block",                                _W, Category.CODE_QUALITY, languages=_BRACES),
    Rule("CQ018", r"\bfinally\s*\{\s*\}",                 "Empty finally block",                            _I, Category.CODE_QUALITY, languages=_BRACES),
    Rule("CQ019", r"\bswitch\s*\([^)]*\)\s*\{\s*\}",      "Empty switch statement",                         _I, Category.CODE_QUALITY, languages=_BRACES),
    Rule("CQ020", r"\bfunction\s+[\w$]+\s*\([^)]*\)\s*\{\s*\}", "Empty function definition",                _I, Category.CODE_QUALITY, languages=_JS),
    Rule("CQ021", r"\bcase\s+(?:true|false)\s*:",         "Switch on boolean - use if-else instead",        _I, Category.CODE_QUALITY, languages=_JS),
    Rule("CQ022", r"\bstyle=\{\{",                        "Inline styles detected - use CSS classes",       _I, Category.CODE_QUALITY, languages=_JS),
    Rule("CQ023", r"\bany\[\]|<any>",                     "Any type usage detected - consider specific typing", _I, Category.CODE_QUALITY, languages=_TS),
)

ERROR_HANDLING_RULES = (
    Rule("ERR001", r"catch\s*\([^)]*\)\s*\{\s*\}",                  "Empty catch block",                              _W, Category.ERROR_HANDLING),
    Rule("ERR002", r"\.catch\s*\(\s*\)",                            "Empty catch block - should handle errors",       _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR003", r"fetch\([^)]*\)(?!\s*\.catch\(|\s*\.then\([^)]*catch)", "fetch call without error handling",      _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR004", r"throw\s+new\s+Error\s*\(",                     "Generic Error thrown - use specific error types", _I, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR005", r"throw\s+[\"'][^\"']+[\"']",                    "Throwing raw string instead of Error object",    _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR006", r"Promise\.all\s*\([^)]*\)(?!\s*\.catch)",        "Promise.all without catch handling",            _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR007", r"^\s*except\s*:",                               "Bare except clause - catch specific exceptions", _W, Category.ERROR_HANDLING, languages=_PY),
    Rule("ERR008", r"^\s*except\s+(?:Base)?Exception\b[^:]*:\s*pass\b", "Exception swallowed silently",              _W, Category.ERROR_HANDLING, languages=_PY),
    Rule("ERR009", r"raise\s+Exception\s*\(",                       "Generic Exception raised - use specific error types", _I, Category.ERROR_HANDLING, languages=_PY),
    Rule("ERR010", r",\s*_\s*:?=\s*\w[\w.]*\(",                     "Error value discarded",                          _W, Category.ERROR_HANDLING, languages=_GO),
    Rule("ERR011", r"\.unwrap\s*\(\s*\)",                           "unwrap() may panic - handle the error",          _I, Category.ERROR_HANDLING, languages=_RS),
    # only try bodies that open and close on one line
    Rule("ERR012", r"\btry\s*\{[^{}]*\}(?!\s*(?:catch|finally)\b)", "Try block without catch or finally",           _C, Category.ERROR_HANDLING, languages=_BRACES),
    Rule("ERR013", r"^(?!.*\btry\b).*\bJSON\.parse\s*\(",           "JSON.parse without try-catch block",             _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR014", r"^(?!.*(?:\.catch\s*\(|\btry\b)).*\bawait\s+[\w$.]+\s*\(", "Await without error handling",        _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR015", r"^(?!.*\.catch\b).*\.then\s*\(.*\)(?:\s*;)?\s*$", "Promise chain without catch",                  _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR016", r"Promise\.(?:race|any|allSettled)\s*\([^)]*\)(?!\s*\.catch)", "Promise.race/any/allSettled without catch handling", _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR017", r"catch\s*\((?:[^)]*\s)?(\w+)\s*\)\s*\{\s*throw\s+\1\s*;?\s*\}", "Re-throwing in catch without modification", _I, Category.ERROR_HANDLING, languages=_BRACES),
    Rule("ERR018", r"\breject\s*\(\s*[\"'`][^\"'`]*[\"'`]\s*\)",    "Promise rejection with string - use Error object", _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR019", r"throw\s+new\s+\w*Error\s*\(\s*\)",             "Throwing Error without message",                 _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR020", r"\.catch\s*\(\s*(?:\w+|\(\w*\))\s*=>\s*(?:\{\s*\}|null|undefined)\s*\)", "Catch handler swallowing errors", _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR021", r"process\.on\s*\(\s*[\"'](?:uncaughtException|unhandledRejection)[\"']",
         "Process-level error handler - ensure graceful shutdown", _I, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR022", r"\bfs\.(?:readFileSync|writeFileSync|unlinkSync|rmSync)\s*\(", "Synchronous filesystem call - handle errors and consider async", _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR023", r"res\.status\s*\(\s*500\s*\)\s*\.send\s*\(",    "500 response sent - ensure the error is logged", _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR024", r"\bemit\s*\(\s*[\"']error[\"']",                "EventEmitter error emission - ensure a listener is attached", _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR025", r"(?://|#)\s*TODO:?\s*error\s+handling",         "Missing error handling (TODO found)",            _W, Category.ERROR_HANDLING),
    Rule("ERR026", r"^\s*void\s+[\w$.]+\s*\(",                      "void async invocation - errors may be unobserved", _W, Category.ERROR_HANDLING, languages=_JS),
    Rule("ERR027", r"^\s*asyncio\.(?:create_task|ensure_future)\s*\(", "Fire-and-forget task - errors may be unobserved", _W, Category.ERROR_HANDLING, languages=_PY),
    Rule("ERR028", r"^\s*except\s+[\w.]+\s+as\s+(\w+)\s*:\s*raise\s+\1\s*$", "Re-raising in except without modification", _I, Category.ERROR_HANDLING, languages=_PY),
)

ARCHITECTURE_RULES = (
    Rule("ARCH001", r"import.*from\s+[\"'`]\.\./\.\./\.\.",     "Deep import path detected - consider refactoring",   _I, Category.ARCHITECTURE, languages=_JS),
    Rule("ARCH002", r"module\.exports\s*=",                     "CommonJS module.exports - consider using ESM export", _W, Category.ARCHITECTURE, languages=_JS),
    Rule("ARCH003", r"\bSingleton\b|\bstatic\s+instance\b",      "Singleton usage - ensure thread safety and testability", _I, Category.ARCHITECTURE),
    Rule("ARCH004", r"export\s+\*\s+from\s+[\"'`][^\"'`]+[\"'`]", "Barrel export detected - ensure tree-shaking and boundary control", _I, Category.ARCHITECTURE, languages=_JS),
    Rule("ARCH005", r"^\s*global\s+\w+",                        "global statement - pass state explicitly",           _I, Category.ARCHITECTURE, languages=_PY),
    Rule("ARCH006", r"\b(?:service|repository|controller)\b.*\bnew\s+\w+\s*\(", "Direct instantiation in service - consider dependency injection", _I, Category.ARCHITECTURE, languages=_BRACES),
    Rule("ARCH007", r"\bextends\s+\w*Manager\b",                "Manager base class - verify single responsibility",   _I, Category.ARCHITECTURE, languages=_BRACES),
    Rule("ARCH008", r"require\s*\(\s*[\"'`]\.\./\.\./\.\.",      "Deep import path detected - consider refactoring",   _I, Category.ARCHITECTURE, languages=_JS),
    Rule("ARCH009", r"^\s*from\s+\.\.\.",                       "Deep relative import - consider absolute imports",    _I, Category.ARCHITECTURE, languages=_PY),
)

DEFAULT_RULES: tuple[Rule, ...] = (
    SECURITY_RULES
    + PERFORMANCE_RULES
    + CODE_QUALITY_RULES
    + ERROR_HANDLING_RULES
    + ARCHITECTURE_RULES
)


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------

GENERIC_SUGGESTION = "Review and refactor this code to follow best practices."

SUGGESTIONS = {
    # security
    "Hardcoded password detected":      "Move password to environment variables or secure configuration.",
    "Hardcoded API key detected":       "Store API keys in environment variables or use a secrets manager.",
    "Hardcoded secret key detected":    "Use environment variables or a secure key management system.",
    "Hardcoded token detected":         "Store tokens securely and avoid hardcoding them.",
    "eval() usage detected - potential security risk": "Avoid eval() and use safer alternatives like JSON.parse().",
    "Function constructor usage - security risk":      "Use regular function declarations or arrow functions instead.",
    "dangerouslySetInnerHTML detected - XSS risk":     "Use safe alternatives like DOM manipulation or React components.",
    "Environment variable access detected":            "Use environment variables securely and avoid exposing sensitive data.",
    "Child process usage detected - security consideration": "Review child process usage for security implications.",
    "Shell command execution detected - security risk": "Pass arguments as a list and never build shell commands from input.",
    "Unsafe deserialization with pickle":              "Only unpickle trusted data, or switch to JSON.",
    "yaml.load without a safe Loader":                 "Use yaml.safe_load() or pass Loader=yaml.SafeLoader.",
    "Hardcoded private key detected":                  "Load private keys from a secure key store or environment.",
    "Hardcoded client secret detected":                "Store client secrets in environment variables or a secrets manager.",
    "Hardcoded JWT secret detected":                   "Use environment variables for JWT secrets.",
    "Hardcoded connection string detected":            "Use environment variables for database connection strings.",
    "Hardcoded URL detected - potential security risk": "Use HTTPS and move endpoints to configuration.",
    "File system access detected":                     "Ensure file access is properly validated and sanitized.",
    "File system write detected - security consideration": "Validate all file write operations and paths.",
    "localStorage usage - sensitive data exposure risk":   "Avoid storing sensitive data in localStorage.",
    "sessionStorage usage - sensitive data exposure risk": "Avoid storing sensitive data in sessionStorage.",
    "Cookie manipulation detected - security risk":    "Set cookies server-side with HttpOnly and Secure flags.",
    "outerHTML assignment - XSS vulnerability":        "Use textContent or DOM APIs instead of outerHTML.",
    "Timer with string argument - code injection risk": "Pass a function to setTimeout/setInterval, never a string.",
    "Synchronous password hashing - blocks the event loop": "Use the asynchronous hashing API.",
    # performance
    "setInterval usage detected - ensure cleanup":     "Add cleanup function to prevent memory leaks.",
    "Multiple map/filter chains - can be optimized":   "Combine operations or use reduce for better performance.",
    "Loop with push - consider using map or reduce":   "Use functional programming methods for better performance.",
    "range(len()) loop - iterate directly or use enumerate": "Iterate over the sequence directly, or use enumerate() for the index.",
    "Infinite loop detected - ensure proper exit condition": "Add a clear exit condition or break statement.",
    "Date.now() is more efficient than new Date().getTime()": "Use Date.now() for timestamps.",
    "Use Array.from() instead of Array.prototype.slice.call()": "Use Array.from() or the spread operator.",
    "Sort then slice - inefficient for large arrays":  "Use a partial selection when only the top items are needed.",
    "Multiple concat calls - consider spread operator": "Use the spread operator to build the array in one step.",
    "JSON.stringify with indent - performance impact": "Drop the indent argument outside of debugging output.",
    # code quality
    "Console statement found - remove in production":  "Remove console statements before deploying to production.",
    "var keyword used - prefer const or let":          "Replace var with const or let for better scoping.",
    "Use === instead of == for strict equality":       "Use strict equality operators to avoid type coercion.",
    "Use !== instead of != for strict inequality":     "Use strict inequality operators to avoid type coercion.",
    "Debugger statement found - remove in production": "Remove debugger statements before deploying.",
    "Temporary code marker detected - should be addressed": "Address TODO/FIXME/HACK comments and implement proper solutions.",
    "Deprecated code detected - should be removed":    "Remove deprecated code and update to newer APIs.",
    "TypeScript ignore directive found":               "Fix TypeScript issues instead of using @ts-ignore.",
    "Type assertion to any detected":                  "Avoid type assertions to any, use proper typing.",
    "Any type usage detected - consider specific typing": "Use specific types instead of any for better type safety.",
    "confirm() usage - use proper UI components":      "Replace confirm() with an accessible dialog component.",
    "prompt() usage - use proper UI components":       "Replace prompt() with a form or dialog component.",
    "Empty try block":                                 "Remove the empty try block or add the guarded code.",
    "Empty if statement with semicolon":               "Remove the stray semicolon after the condition.",
    "Empty for loop with semicolon":                   "Remove the stray semicolon after the loop header.",
    # error handling
    "fetch call without error handling":               "Add .catch() block or try-catch for error handling.",
    "Empty catch block - should handle errors":        "Add proper error handling in catch blocks.",
    "Empty catch block":                               "Add proper error handling in catch blocks.",
    "Generic Error thrown - use specific error types": "Create and use specific error types for better error handling.",
    "Bare except clause - catch specific exceptions":  "Catch the specific exception types the block can handle.",
    "Generic Exception raised - use specific error types": "Define and raise a specific exception class.",
    "Throwing raw string instead of Error object":     "Throw Error objects so callers get a stack trace.",
    "Promise.all without catch handling":              "Add .catch() or wrap Promise.all in try-catch.",
    "Exception swallowed silently":                    "Log the exception or let it propagate.",
    "Error value discarded":                           "Check the returned error before using the result.",
    "unwrap() may panic - handle the error":           "Use ? or match on the Result instead of unwrap().",
    "Process-level error handler - ensure graceful shutdown": "Log the error and exit cleanly from the handler.",
    "500 response sent - ensure the error is logged":  "Log the underlying error before sending the response.",
    "EventEmitter error emission - ensure a listener is attached": "Register an 'error' listener on the emitter.",
    "Missing error handling (TODO found)":             "Implement the missing error handling.",
    "Try block without catch or finally":              "Add catch or finally block to handle errors.",
    "JSON.parse without try-catch block":              "Wrap JSON.parse in try-catch to handle parsing errors.",
    "Await without error handling":                    "Use try-catch block for await operations.",
    "Promise chain without catch":                     "Add .catch() to the end of the promise chain.",
    "Promise.race/any/allSettled without catch handling": "Add .catch() or wrap the call in try-catch.",
    "Re-throwing in catch without modification":       "Modify or log errors before re-throwing.",
    "Re-raising in except without modification":       "Drop the handler or add context before re-raising.",
    "Promise rejection with string - use Error object": "Reject with an Error instance to keep the stack trace.",
    "Throwing Error without message":                  "Give every thrown error a descriptive message.",
    "Catch handler swallowing errors":                 "Log or rethrow errors inside catch handlers.",
    "Synchronous filesystem call - handle errors and consider async": "Use the promise-based fs API inside try-catch.",
    "void async invocation - errors may be unobserved": "Await the promise or attach a .catch() handler.",
    "Fire-and-forget task - errors may be unobserved": "Keep a reference to the task and inspect its result.",
    # architecture
    "Deep import path detected - consider refactoring": "Consider using absolute imports or restructuring directories.",
    "Deep relative import - consider absolute imports": "Import from the package root instead.",
    "Direct instantiation in service - consider dependency injection": "Inject collaborators through the constructor.",
}


def suggestion_for(message: str) -> str:
    """Return the remediation text for a rule message."""
    return SUGGESTIONS.get(message, GENERIC_SUGGESTION)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class RuleEngine:
    """Applies a rule table to raw text, one issue per matching line.

    Compiled patterns are cached on the instance, so each analysis run owns
    its cache and concurrent runs never share one.
    """

    def __init__(
        self,
        rules: Iterable[Rule] = DEFAULT_RULES,
        max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
    ) -> None:
        self.rules = tuple(rules)
        self.max_line_length = max_line_length
        self._compiled: dict[str, re.Pattern | None] = {}
        self.cache_hits = 0
        self.cache_misses = 0

    @classmethod
    def from_config(cls, config) -> "RuleEngine":
        """Build an engine from the default table minus disabled rules."""
        disabled_categories = set(config.disabled_categories)
        disabled_rules = set(config.disabled_rules)
        rules = [
            r for r in DEFAULT_RULES
            if r.category.value not in disabled_categories and r.id not in disabled_rules
        ]
        return cls(rules, max_line_length=config.max_line_length)

    def pattern(self, rule: Rule) -> re.Pattern | None:
        """Return the compiled pattern for *rule*, or None if it is invalid."""
        if rule.id in self._compiled:
            self.cache_hits += 1
            return self._compiled[rule.id]
        self.cache_misses += 1
        try:
            compiled = re.compile(rule.pattern, rule.flags)
        except re.error as exc:
            logger.error("Rule %s has an invalid pattern, skipping: %s", rule.id, exc)
            compiled = None
        self._compiled[rule.id] = compiled
        return compiled

    def scan(self, path: str, content: str, next_id: Callable[[], str]) -> list[ReviewIssue]:
        """Return one issue per (rule, matching line) in *content*."""
        language = detect_language(path)
        lines = [line[:self.max_line_length] for line in content.split("\n")]
        issues: list[ReviewIssue] = []

        for rule in self.rules:
            if not rule.applies_to(language):
                continue
            compiled = self.pattern(rule)
            if compiled is None:
                continue
            try:
                matching = [n for n, line in enumerate(lines, start=1) if compiled.search(line)]
            except (RecursionError, re.error) as exc:
                logger.warning("Rule %s failed on '%s', skipping: %s", rule.id, path, exc)
                continue
            for number in matching:
                issues.append(ReviewIssue(
                    id=next_id(),
                    severity=rule.severity,
                    category=rule.category,
                    file=path,
                    line=number,
                    title=rule.message,
                    description=rule.message,
                    suggestion=suggestion_for(rule.message),
                ))

        return issues
