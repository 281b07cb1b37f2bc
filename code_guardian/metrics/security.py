"""Classification of security issues into CWE-tagged vulnerabilities."""

from typing import Sequence

from code_guardian.models import Category, ReviewIssue, RiskTier, SecurityReport, Vulnerability

MAX_RISK_SCORE = 100

# issue title -> (CWE id, tier)
CWE_MAPPING: dict[str, tuple[str, RiskTier]] = {
    "Hardcoded password detected":                      ("CWE-256", RiskTier.CRITICAL),
    "Hardcoded API key detected":                       ("CWE-798", RiskTier.CRITICAL),
    "Hardcoded secret key detected":                    ("CWE-798", RiskTier.CRITICAL),
    "Hardcoded token detected":                         ("CWE-798", RiskTier.CRITICAL),
    "eval() usage detected - potential security risk":  ("CWE-94",  RiskTier.HIGH),
    "Function constructor usage - security risk":       ("CWE-94",  RiskTier.HIGH),
    "dangerouslySetInnerHTML detected - XSS risk":      ("CWE-79",  RiskTier.HIGH),
    "innerHTML assignment - XSS vulnerability":         ("CWE-79",  RiskTier.HIGH),
    "document.write() usage - XSS risk":                ("CWE-79",  RiskTier.HIGH),
    "Shell command execution detected - security risk": ("CWE-78",  RiskTier.CRITICAL),
    "Unsafe deserialization with pickle":               ("CWE-502", RiskTier.HIGH),
    "yaml.load without a safe Loader":                  ("CWE-502", RiskTier.MEDIUM),
    "MD5 hash usage - weak cryptographic algorithm":    ("CWE-327", RiskTier.MEDIUM),
    "SHA1 hash usage - weak cryptographic algorithm":   ("CWE-327", RiskTier.MEDIUM),
    "TLS certificate verification disabled":            ("CWE-295", RiskTier.MEDIUM),
    "Math.random() usage - not cryptographically secure": ("CWE-338", RiskTier.LOW),
    "Hardcoded private key detected":                   ("CWE-321", RiskTier.CRITICAL),
    "Hardcoded client secret detected":                 ("CWE-798", RiskTier.CRITICAL),
    "Hardcoded JWT secret detected":                    ("CWE-798", RiskTier.CRITICAL),
    "Hardcoded connection string detected":             ("CWE-798", RiskTier.CRITICAL),
    "outerHTML assignment - XSS vulnerability":         ("CWE-79",  RiskTier.HIGH),
    "Timer with string argument - code injection risk": ("CWE-95",  RiskTier.HIGH),
    "localStorage usage - sensitive data exposure risk":   ("CWE-922", RiskTier.MEDIUM),
    "sessionStorage usage - sensitive data exposure risk": ("CWE-922", RiskTier.MEDIUM),
    "Cookie manipulation detected - security risk":     ("CWE-1004", RiskTier.MEDIUM),
    "Hardcoded URL detected - potential security risk": ("CWE-319", RiskTier.LOW),
    "File system access detected":                      ("CWE-73",  RiskTier.LOW),
    "File system write detected - security consideration": ("CWE-73", RiskTier.LOW),
}


def analyze_security(issues: Sequence[ReviewIssue]) -> SecurityReport:
    """Map known security issue titles to vulnerabilities and a capped risk score."""
    vulnerabilities = []
    risk = 0
    for issue in issues:
        if issue.category is not Category.SECURITY or issue.title not in CWE_MAPPING:
            continue
        cwe, tier = CWE_MAPPING[issue.title]
        vulnerabilities.append(Vulnerability(
            type=issue.title,
            severity=tier,
            file=issue.file,
            line=issue.line,
            description=issue.description,
            cwe=cwe,
        ))
        risk += tier.weight
    return SecurityReport(vulnerabilities=tuple(vulnerabilities), risk_score=min(MAX_RISK_SCORE, risk))
