"""
Prompt builder for app store cover generation.
Turns a wizard configuration and the project's assets into one structured prompt.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List

from covergen.schemas.generation import JobConfig


@dataclass(frozen=True)
class StylePreset:
    id: str
    name: str
    description: str
    contrast: str
    density: str
    tone: str
    layout_rules: List[str]


@dataclass(frozen=True)
class AspectRatio:
    width: int
    height: int
    ratio: str


STYLE_PRESETS: Dict[str, StylePreset] = {
    "minimal": StylePreset(
        id="minimal",
        name="Minimal / Apple-like",
        description="Clean, spacious design with lots of whitespace",
        contrast="low",
        density="sparse",
        tone="premium",
        layout_rules=[
            "Single focal point",
            "Generous whitespace (40%+ of canvas)",
            "Subtle gradients or solid colors",
            "Minimal or no text",
            "One primary element",
        ],
    ),
    "bold-gradient": StylePreset(
        id="bold-gradient",
        name="Bold Gradient",
        description="Vibrant gradients with strong visual impact",
        contrast="high",
        density="balanced",
        tone="energetic",
        layout_rules=[
            "Bold gradient backgrounds",
            "High contrast elements",
            "Dynamic composition",
            "Vibrant color palette",
            "Modern, eye-catching design",
        ],
    ),
    "neon-gaming": StylePreset(
        id="neon-gaming",
        name="Neon Gaming",
        description="Futuristic neon aesthetics for gaming apps",
        contrast="high",
        density="dense",
        tone="energetic",
        layout_rules=[
            "Neon color accents",
            "Dark backgrounds",
            "Glowing effects",
            "Dynamic action elements",
            "Gaming aesthetic",
        ],
    ),
    "corporate-trust": StylePreset(
        id="corporate-trust",
        name="Corporate Trust",
        description="Professional, trustworthy design for business apps",
        contrast="medium",
        density="balanced",
        tone="professional",
        layout_rules=[
            "Professional color palette",
            "Clean typography",
            "Structured layout",
            "Trust-building elements",
            "Corporate aesthetic",
        ],
    ),
    "modern-saas": StylePreset(
        id="modern-saas",
        name="Modern SaaS",
        description="Contemporary SaaS product aesthetic",
        contrast="medium",
        density="balanced",
        tone="professional",
        layout_rules=[
            "Modern UI elements",
            "Soft shadows and depth",
            "Contemporary color schemes",
            "Product-focused composition",
            "SaaS aesthetic",
        ],
    ),
}

DEFAULT_STYLE_PRESET = "minimal"

GOAL_CLAUSES = {
    "attention": "Design should be eye-catching and grab immediate attention. ",
    "clarity": "Design should clearly communicate the app's purpose and value. ",
    "trust": "Design should convey professionalism and trustworthiness. ",
    "premium": "Design should feel premium, sophisticated, and high-quality. ",
    "playful": "Design should be fun, energetic, and engaging. ",
}

APPSTORE_CLAUSE = (
    "iOS App Store style: Square format (1024x1024px), minimal and elegant design with clean typography. "
)
PLAYSTORE_CLAUSE = (
    "Google Play Store style: Feature graphic format (1024x500px), vibrant and engaging design. "
)

SQUARE = AspectRatio(width=1024, height=1024, ratio="1:1")
FEATURE_GRAPHIC = AspectRatio(width=1024, height=500, ratio="1024:500")

_ASPECT_BY_STORE = {
    "appstore": SQUARE,
    "ios": SQUARE,
    "playstore": FEATURE_GRAPHIC,
    "android": FEATURE_GRAPHIC,
}

_ASPECT_BY_RATIO = {
    SQUARE.ratio: SQUARE,
    FEATURE_GRAPHIC.ratio: FEATURE_GRAPHIC,
}


def _value(item) -> str:
    """Return the plain string value of an enum member or string"""
    if item is None:
        return ""
    return getattr(item, "value", item)


def get_style_preset(preset_id: str) -> StylePreset:
    """Look up a style preset, falling back to the minimal preset"""
    return STYLE_PRESETS.get(preset_id) or STYLE_PRESETS[DEFAULT_STYLE_PRESET]


def get_aspect_ratio(target_store) -> AspectRatio:
    """Output dimensions for a target store. Unknown stores get the square format."""
    return _ASPECT_BY_STORE.get(_value(target_store), SQUARE)


def get_target_size_for_ratio(ratio: str) -> AspectRatio:
    """Resolve a stored aspect ratio string back to its output dimensions"""
    return _ASPECT_BY_RATIO.get(ratio or "", SQUARE)


def select_assets_by_role(config: JobConfig, assets: Iterable, role: str) -> List:
    """
    Assets selected with the given role whose declared type matches that role.
    An asset selected as a screenshot but uploaded as a logo is not counted.
    """
    selected_ids = {
        str(selection.asset_id)
        for selection in config.selected_assets
        if _value(selection.role) == role
    }
    return [
        asset for asset in assets
        if str(asset.id) in selected_ids and _value(asset.type) == role
    ]


def build_cover_prompt(config: JobConfig, assets: Iterable) -> str:
    """
    Build the generation prompt for a wizard configuration.

    Clauses are appended in a fixed order: subject, goal, store formats,
    style preset, asset instructions, main message and the closing
    quality directives. Assets only contribute content-free instructions.
    """
    assets = list(assets)
    preset = get_style_preset(config.style_preset)
    reference_covers = select_assets_by_role(config, assets, "reference_cover")
    screenshots = select_assets_by_role(config, assets, "app_screenshot")
    logos = select_assets_by_role(config, assets, "brand_logo")
    target_store = _value(config.target_store)

    prompt = f"Create a professional app store cover image for a {config.app_category} app. "

    prompt += GOAL_CLAUSES.get(_value(config.goal), "")

    if target_store in ("appstore", "ios", "both"):
        prompt += APPSTORE_CLAUSE
    if target_store in ("playstore", "android", "both"):
        prompt += PLAYSTORE_CLAUSE

    prompt += f"{preset.name} style: {preset.description}. "
    prompt += f"Tone: {preset.tone}. "
    prompt += f"Contrast level: {preset.contrast}. "
    prompt += f"Visual density: {preset.density}. "
    if preset.layout_rules:
        prompt += f"Layout guidelines: {', '.join(preset.layout_rules)}. "

    if reference_covers:
        prompt += "Use similar style, color palette, and aesthetic approach as the provided reference covers. "

    if screenshots:
        prompt += "Incorporate visual elements, UI components, and color scheme from the provided app screenshots. "
        if len(screenshots) == 1:
            prompt += "Show one screenshot prominently. "
        elif len(screenshots) == 2:
            prompt += "Show two screenshots in a balanced composition. "
        else:
            prompt += f"Show {len(screenshots)} screenshots in an organized collage layout. "

    if logos:
        prompt += "Include brand identity and colors from the provided brand logos. "

    if config.main_message:
        prompt += f'The cover should communicate: "{config.main_message}". '

    prompt += (
        "High quality, professional design. Ensure mobile readability, proper contrast, "
        "single focal point, and safe margins. "
    )
    prompt += "No text overlays unless specifically requested. Clean background. "
    prompt += "The final image should be production-ready for app store submission. "

    return prompt.strip()
