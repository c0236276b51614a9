"""
Rule-based critique of a cover configuration.
Advisory only: the result never blocks job creation.
"""
from typing import Dict, List

from covergen.schemas.generation import CritiqueIssue, CritiqueResult, JobConfig


def _summarize(score: int, issues: List[CritiqueIssue]) -> str:
    error_count = sum(1 for issue in issues if issue.severity == "error")
    warning_count = sum(1 for issue in issues if issue.severity == "warning")

    if score >= 90:
        summary = "Excellent configuration! Ready to generate high-quality covers."
    elif score >= 70:
        summary = "Good configuration with minor improvements suggested."
    elif score >= 50:
        summary = "Configuration needs attention. Review warnings before generating."
    else:
        summary = "Configuration has critical issues. Please fix errors before generating."

    if error_count > 0:
        summary += f" {error_count} error(s) must be fixed."
    if warning_count > 0:
        summary += f" {warning_count} warning(s) to consider."
    return summary


def count_selected_roles(selected_assets) -> Dict[str, int]:
    """Per-role counts of the selected assets, keyed the way critique_cover_config reads them"""
    roles = [getattr(selection.role, "value", selection.role) for selection in selected_assets]
    return {
        "reference_covers": roles.count("reference_cover"),
        "screenshots": roles.count("app_screenshot"),
        "logos": roles.count("brand_logo"),
    }


def critique_cover_config(config: JobConfig, asset_counts: Dict[str, int]) -> CritiqueResult:
    """
    Score a configuration from 100 down, one penalty per rule that fires.

    asset_counts carries "reference_covers", "screenshots" and "logos" as
    produced by count_selected_roles.
    """
    issues: List[CritiqueIssue] = []
    score = 100
    reference_covers = asset_counts.get("reference_covers", 0)
    screenshots = asset_counts.get("screenshots", 0)
    goal = getattr(config.goal, "value", config.goal)
    target_store = getattr(config.target_store, "value", config.target_store)
    main_message = config.main_message or ""

    if reference_covers == 0:
        issues.append(CritiqueIssue(
            severity="error",
            category="assets",
            message="No reference covers selected",
            suggestion="Add at least one reference cover for style inspiration",
        ))
        score -= 20

    if screenshots < 2:
        issues.append(CritiqueIssue(
            severity="warning",
            category="assets",
            message=f"Only {screenshots} screenshot(s) selected",
            suggestion="Consider adding 2-3 screenshots for better content representation",
        ))
        score -= 10

    enabled_count = len(config.enabled_variants())
    if enabled_count == 0:
        issues.append(CritiqueIssue(
            severity="error",
            category="layout",
            message="No variants enabled",
            suggestion="Enable at least one variant to generate covers",
        ))
        score -= 30

    if enabled_count > 4:
        issues.append(CritiqueIssue(
            severity="warning",
            category="layout",
            message=f"{enabled_count} variants enabled",
            suggestion="Consider generating 2-4 variants for better focus",
        ))
        score -= 5

    if len(main_message.strip()) < 5:
        issues.append(CritiqueIssue(
            severity="warning",
            category="content",
            message="Main message is too short or missing",
            suggestion="Add a clear value proposition (5-15 words)",
        ))
        score -= 10

    if len(main_message) > 50:
        issues.append(CritiqueIssue(
            severity="info",
            category="content",
            message="Main message is quite long",
            suggestion="Keep value propositions concise for better readability",
        ))
        score -= 5

    if goal == "premium" and config.style_preset == "neon-gaming":
        issues.append(CritiqueIssue(
            severity="warning",
            category="style",
            message="Style mismatch: Premium goal with gaming style",
            suggestion="Consider 'Minimal' or 'Modern SaaS' style for premium feel",
        ))
        score -= 10

    if goal == "playful" and config.style_preset == "corporate-trust":
        issues.append(CritiqueIssue(
            severity="warning",
            category="style",
            message="Style mismatch: Playful goal with corporate style",
            suggestion="Consider 'Bold Gradient' or 'Neon Gaming' style for playful feel",
        ))
        score -= 10

    if screenshots > 5:
        issues.append(CritiqueIssue(
            severity="info",
            category="layout",
            message="Many screenshots selected",
            suggestion="Too many screenshots may create clutter. Consider 2-4 for best results",
        ))
        score -= 5

    # Informational, no penalty
    if target_store == "both":
        issues.append(CritiqueIssue(
            severity="info",
            category="technical",
            message="Generating for both stores",
            suggestion="Consider generating separate covers for each store for optimal results",
        ))

    score = max(0, score)
    return CritiqueResult(score=score, issues=issues, summary=_summarize(score, issues))
