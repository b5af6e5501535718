"""Feature-level scenario coverage of an LLM test-design report.

Complements the report structure check: that one verifies sections and
counts, this one verifies that the scenarios a given feature must cover
are mentioned at all. Keyword lists match the report language.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

SELF_CHECK_MARKER = "(D) 自己検証"


@dataclass(frozen=True)
class KeywordRule:
    key: str
    patterns: tuple[str, ...]


@dataclass(frozen=True)
class FeatureRule:
    aliases: tuple[str, ...]  # substrings of the feature name that select this rule
    keywords: tuple[KeywordRule, ...]


FEATURE_RULES: tuple[FeatureRule, ...] = (
    FeatureRule(
        aliases=("ログイン", "login"),
        keywords=(
            KeywordRule("successful_login", ("正常", "成功", "ログイン成功")),
            KeywordRule("mfa", ("MFA", "多要素", "二要素", "ワンタイム", "OTP")),
            KeywordRule("lockout", ("ロック", "試行制限", "アカウントロック")),
            KeywordRule("invalid_input", ("誤ったパスワード", "不正", "無効", "存在しない")),
            KeywordRule("security", ("SQLインジェクション", "XSS", "ブルートフォース", "セッション")),
        ),
    ),
    FeatureRule(
        aliases=("振込", "transfer"),
        keywords=(
            KeywordRule("successful_transfer", ("正常", "成功", "振込完了")),
            KeywordRule("insufficient_balance", ("残高不足", "残高超過")),
            KeywordRule("limit", ("上限", "限度額", "最大")),
            KeywordRule("approval_flow", ("承認", "二重承認", "承認者")),
            KeywordRule("double_submit", ("二重送信", "二重振込", "冪等")),
        ),
    ),
    FeatureRule(
        aliases=("監査ログ", "audit log"),
        keywords=(
            KeywordRule("admin_role", ("admin", "管理者")),
            KeywordRule("auditor_role", ("auditor", "監査")),
            KeywordRule("customer_role", ("customer", "顧客", "一般ユーザ")),
            KeywordRule("permission_denied", ("権限なし", "アクセス拒否", "禁止", "403")),
        ),
    ),
)


def find_feature_rule(feature: str) -> FeatureRule | None:
    lowered = feature.lower()
    for rule in FEATURE_RULES:
        if any(alias.lower() in lowered for alias in rule.aliases):
            return rule
    return None


def check_feature_coverage(text: str, feature: str) -> dict[str, Any]:
    """Check that ``text`` mentions every required scenario for ``feature``.

    Returns:
        ``{"valid": bool, "coverage": {key: bool}, "issues": [str]}``
    """
    rule = find_feature_rule(feature)
    if rule is None:
        return {
            "valid": True,
            "coverage": {"note": f'No specific rule defined for feature: "{feature}"'},
            "issues": [],
        }

    coverage: dict[str, Any] = {}
    issues: list[str] = []
    for kw in rule.keywords:
        found = any(p in text for p in kw.patterns)
        coverage[kw.key] = found
        if not found:
            issues.append(
                f'Missing scenario coverage: "{kw.key}" (expected one of: {", ".join(kw.patterns)})'
            )

    has_self_check = SELF_CHECK_MARKER in text
    coverage["self_validation_section"] = has_self_check
    if not has_self_check:
        issues.append(f'Missing "{SELF_CHECK_MARKER}" section')

    return {"valid": not issues, "coverage": coverage, "issues": issues}
