"""Default guardrail rule tables.

SQL rules are evaluated first-match; shell and secret rules are evaluated
all-match. Secret rules are ordered vendor shapes first and key/value
assignments last, so sanitizing applies the partial masks before the generic
assignment masks.
"""

from typing import Tuple

from .models import GuardrailRule, Severity, ViolationType

_IDENT = r"[\w.\"`]+"
_RECURSIVE_RM = (
    r"\brm\s+(?:-{1,2}[\w-]+\s+)*(?:-[a-zA-Z]*[rR][a-zA-Z]*|--recursive)\s+(?:-{1,2}[\w-]+\s+)*"
)
_CMD_END = r"(?=[\s;&|]|$)"


def _sql(name: str, pattern: str, description: str, *, dotall: bool = False) -> GuardrailRule:
    return GuardrailRule(
        name=name,
        pattern=pattern,
        violation_type=ViolationType.sql,
        severity=Severity.blocked,
        description=description,
        ignore_case=True,
        dotall=dotall,
    )


def _shell(name: str, pattern: str, description: str) -> GuardrailRule:
    return GuardrailRule(
        name=name,
        pattern=pattern,
        violation_type=ViolationType.shell,
        severity=Severity.blocked,
        description=description,
        ignore_case=True,
    )


def _secret(name: str, pattern: str, description: str, mask: str, *, ignore_case: bool = False) -> GuardrailRule:
    return GuardrailRule(
        name=name,
        pattern=pattern,
        violation_type=ViolationType.secret,
        severity=Severity.warning,
        description=description,
        ignore_case=ignore_case,
        mask=mask,
    )


DEFAULT_SQL_RULES: Tuple[GuardrailRule, ...] = (
    _sql(
        "sql_drop_object",
        r"\bDROP\s+(?:TABLE|DATABASE|INDEX|VIEW|SCHEMA)\b",
        "Destructive SQL: DROP of a table, database, index, view or schema",
    ),
    _sql("sql_truncate", rf"\bTRUNCATE\s+(?:TABLE\s+)?{_IDENT}", "Destructive SQL: TRUNCATE"),
    _sql(
        "sql_delete_without_where",
        rf"\bDELETE\s+FROM\s+{_IDENT}\s*(?:;|$)",
        "Destructive SQL: DELETE without a WHERE clause",
    ),
    _sql(
        "sql_delete_tautology",
        rf"\bDELETE\s+FROM\s+{_IDENT}\s+WHERE\s+1\s*=\s*1\b",
        "Destructive SQL: DELETE with a WHERE 1=1 tautology",
    ),
    _sql(
        "sql_update_tautology",
        rf"\bUPDATE\s+{_IDENT}\s+SET\s+.*?\bWHERE\s+1\s*=\s*1\b",
        "Destructive SQL: UPDATE with a WHERE 1=1 tautology",
        dotall=True,
    ),
    _sql("sql_alter_drop", r"\bALTER\s+TABLE\s+.*?\bDROP\b", "Destructive SQL: ALTER TABLE ... DROP", dotall=True),
    _sql("sql_grant_all", r"\bGRANT\s+ALL\b", "Privilege change: GRANT ALL"),
    _sql("sql_revoke", r"\bREVOKE\b", "Privilege change: REVOKE"),
)


DEFAULT_SHELL_RULES: Tuple[GuardrailRule, ...] = (
    _shell(
        "shell_rm_root_or_home",
        _RECURSIVE_RM + r"(?:/|~|\$HOME)/?\*?" + _CMD_END,
        "Recursive delete of the filesystem root or home directory",
    ),
    _shell("shell_rm_wildcard", _RECURSIVE_RM + r"(?:\./)?\*" + _CMD_END, "Recursive delete of a bare wildcard"),
    _shell("shell_chmod_777", r"\bchmod\s+777\b", "World-writable permissions: chmod 777"),
    _shell("shell_chmod_recursive_777", r"\bchmod\s+-R\s+777\b", "World-writable permissions: chmod -R 777"),
    _shell("shell_mkfs", r"\bmkfs\b", "Filesystem format command"),
    _shell("shell_dd_device", r"\bdd\s+.*\bof=/dev/(?!null\b)", "Raw device write with dd"),
    _shell("shell_redirect_disk", r">\s*/dev/(?:sd|nvme|hd|xvd)", "Redirect onto a raw disk device"),
    _shell(
        "shell_pipe_to_shell",
        r"\b(?:curl|wget)\b[^|;&]*\|\s*(?:sudo\s+)?(?:ba|z|k|da)?sh\b",
        "Remote script piped into a shell interpreter",
    ),
    _shell("shell_eval_substitution", r"\beval\s+\$\(", "eval of a command substitution"),
    # Leading \b cannot match before ':' at the start of a command or after
    # whitespace, so only a fork bomb glued to a preceding word is caught.
    _shell("shell_fork_bomb", r"\b:\(\)\{\s*:\|:&\s*\};:", "Fork bomb"),
)


_PEM_KIND = r"(?:RSA |DSA |EC |OPENSSH |ENCRYPTED )?"

DEFAULT_SECRET_RULES: Tuple[GuardrailRule, ...] = (
    _secret(
        "aws_access_key_id",
        r"\b(AKIA|ASIA)[0-9A-Z]{16}\b",
        "Potential AWS access key ID",
        r"\g<1>" + "*" * 16,
    ),
    _secret(
        "github_token",
        r"\b(gh[pousr]_)[A-Za-z0-9]{36}\b",
        "Potential GitHub token",
        r"\g<1>" + "*" * 36,
    ),
    _secret(
        "openai_api_key",
        r"\b(sk-)[A-Za-z0-9]{48}\b",
        "Potential OpenAI API key",
        r"\g<1>" + "*" * 48,
    ),
    _secret(
        "slack_token",
        r"\b(xox[baprs]-)[A-Za-z0-9-]+",
        "Potential Slack token",
        r"\g<1>****",
    ),
    _secret(
        "private_key_block",
        rf"-----BEGIN {_PEM_KIND}PRIVATE KEY-----(?:[\s\S]*?-----END {_PEM_KIND}PRIVATE KEY-----)?",
        "Private key material",
        "[REDACTED PRIVATE KEY]",
    ),
    _secret(
        "api_key_assignment",
        r"\b(api[_-]?key|access[_-]?token|auth[_-]?token|token)\s*[=:]\s*['\"]?[A-Za-z0-9_\-]{20,}",
        "Potential API key or token assignment",
        r"\g<1>=***REDACTED***",
        ignore_case=True,
    ),
    _secret(
        "password_assignment",
        r"\b(secret|password|passwd|pwd)\s*[=:]\s*['\"]?(?!\*\*\*REDACTED\*\*\*)[^\s'\"]{8,}",
        "Potential password or secret assignment",
        r"\g<1>=***REDACTED***",
        ignore_case=True,
    ),
)
