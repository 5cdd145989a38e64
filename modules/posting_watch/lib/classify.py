from __future__ import annotations

from .cleaning import normalize_text
from .models import Division

# Substring keywords per division. Leading/trailing spaces are significant
# ("it ", "ap ") so short tokens don't fire inside longer words.
TECH_KEYWORDS: tuple[str, ...] = (
    "software", "engineer", "developer", "devops", "sre", "site reliability",
    "data", "analytics", "machine learning", "ml", "ai", "cloud", "aws", "azure", "gcp",
    "security", "cyber", "infosec", "network", "systems", "infrastructure",
    "it ", " it-", "help desk", "helpdesk", "service desk", "servicedesk",
    "qa", "test ", "testing", "automation", "product manager", "product management",
    "solutions engineer", "integration", "implementation", "salesforce", "sap", "oracle",
    "sql", "python", "java", "javascript", "react", "node", "kubernetes", "docker",
    "architect", "platform", "mobile", "ios", "android",
)

FINANCE_KEYWORDS: tuple[str, ...] = (
    "accounting", "accountant", "finance", "financial", "fp&a", "fpa",
    "controller", "controllership", "cpa", "audit", "auditor",
    "tax", "treasury", "payroll", "ap ", "a/p", "accounts payable",
    "ar ", "a/r", "accounts receivable", "billing", "credit", "collections",
    "bookkeeper", "bookkeeping", "cost accountant", "revenue", "budget", "forecast",
    "procurement", "purchasing", "p2p", "r2r",
)

GENERAL_KEYWORDS: tuple[str, ...] = (
    "operations", "operator", "warehouse", "manufacturing", "plant",
    "production", "logistics", "driver", "terminal", "maintenance", "technician",
    "field", "safety", "health & safety", "hse", "hr ", "human resources",
    "recruiter", "recruiting", "coordinator", "assistant", "admin",
    "customer service", "csr", "sales", "account manager", "marketing",
    "manager", "supervisor", "specialist", "analyst",
)


def keyword_score(text: str, keywords: tuple[str, ...]) -> int:
    """Number of distinct keywords occurring as substrings of `text`."""
    return sum(1 for k in set(keywords) if k in text)


def classify_division(title: str | None, url: str | None) -> Division:
    """
    Best-guess division for a posting. Never raises and never drops a job:
    no keyword signal means Uncategorized.
    """
    text = f"{normalize_text(title)} {url or ''}".lower()

    s_tech = keyword_score(text, TECH_KEYWORDS)
    s_fin = keyword_score(text, FINANCE_KEYWORDS)
    s_gen = keyword_score(text, GENERAL_KEYWORDS)

    if s_tech > s_fin and s_tech > s_gen:
        return Division.TECHNOLOGY
    if s_fin > s_tech and s_fin > s_gen:
        return Division.FINANCE
    if s_gen > 0:
        return Division.GENERAL_STAFFING
    return Division.UNCATEGORIZED
