"""Storyboard image prompt templates.

One combined prompt describes a single storyboard page that holds every
scene as a panel. The style guide is chosen by content classification and
storytelling mode.
"""

AD_STYLE_GUIDE = """Style: AI-cartoonized modern illustration with vibrant colors, smooth gradients, and dynamic compositions.
- Modern, sleek, polished digital illustration style
- Colorful with vibrant hues and smooth color gradients
- Clean, professional look suitable for advertisements
- Dynamic angles and eye-catching compositions
- Glossy, 3D-rendered aesthetic with depth and dimension
- Energetic and engaging visual storytelling
- Contemporary commercial art style
- Product/brand-focused visual hierarchy"""

NARRATIVE_STYLE_GUIDE = """Style: Comic book / graphic novel illustration with expressive characters and vibrant backgrounds.
- Bold outlined characters with thick black ink lines
- Colorful, expressive comic-style panels
- Dynamic action poses and dramatic angles
- Vibrant backgrounds with rich colors
- Traditional comic book shading and highlights
- Expressive facial features and body language
- Sequential art storytelling techniques
- Manga/graphic novel aesthetic with energy lines and motion"""

AD_PHOTO_STYLE_GUIDE = """Style: Photorealistic commercial photography, high-end advertising campaign look.
- Photorealistic, NO cartoon, NO illustration, NO drawing
- Studio-quality lighting with crisp product and people detail
- Clean, professional look suitable for advertisements
- Shallow depth of field, premium commercial color grading
- Product/brand-focused visual hierarchy with people in the foreground"""

NARRATIVE_PHOTO_STYLE_GUIDE = """Style: Photorealistic cinematic film stills, live-action movie look.
- Photorealistic, NO cartoon, NO illustration, NO comic style
- Cinematic lighting, anamorphic framing, natural skin tones
- Characters prominent in frame: close-ups and medium shots with clear faces
- Real-world locations and textures, film grain
- Consistent actors, wardrobe, and color grading across panels"""

REAL_PERSON_DIRECTIVE = (
    "- If a panel names a real person, render them recognizably as themselves, "
    "with their real likeness as the main subject"
)

# Storyboard page prompt
# Template placeholders: {panel_count}, {style_guide}, {panels}, {layout_look},
# {artwork_look}, {extra_rules}
STORYBOARD_PAGE = """Create a single storyboard page layout containing {panel_count} distinct panels arranged in a comic-style grid.

{style_guide}

Panel descriptions ({panel_count} scenes total):
{panels}

Layout requirements:
- Single page containing all {panel_count} panels
- Each panel should be clearly separated with borders
- Panels arranged in a visually appealing grid (2-3 panels per row)
- Vary panel sizes for visual interest
- Maintain consistent art style across all panels
- {layout_look}
- NO text overlays, NO speech bubbles, NO captions - pure visual storytelling
- Cohesive color palette throughout the composition
- {artwork_look}
{extra_rules}
The final image should be a complete storyboard page showing all {panel_count} story beats in one unified composition."""
