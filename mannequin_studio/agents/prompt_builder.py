"""Prompt templates for image, caption and product description requests."""

from ..models import ModelOptions


QUALITY_NOTES = (
    "Ultra-realistic rendering, professional photo quality (8K). Pay attention to skin detail, "
    "fabric texture and natural lighting. The result must not look artificial."
)

DESCRIBE_PROMPT = """Analyze the product shown in the provided images.

Describe it in one short sentence in French, starting with its category
(for example: vêtement, bijou, montre, chaussures, sac, lunettes, cosmétique),
then its main color, material and distinctive details.

Return ONLY the sentence, no explanation and no markdown."""


FACE_IMAGE_TEMPLATE = """Create a photorealistic image of a model wearing or presenting a product, using the provided images.

## Provided images:
- The first images contain the product(s) to feature.
- The VERY LAST image is the face reference.

## Instructions (in priority order):
1. **Face (absolute priority):** The model's face must be an exact copy of the reference face. Eye, nose and mouth shape and skin texture must be identical. The skin tone of the whole body (neck, hands) must match the face.
2. **Model & product:**
   - Product: {product}.
   - Body type: {body_type}.
   - Overall style: {style}.
   - Pose: "{pose}".
   - Ambiance & lighting: a "{ambiance}" scene, lighting on the model must be consistent.
3. **Quality & format:**
   - Quality: {quality}
   - Format: square, high resolution."""


PERSONA_IMAGE_TEMPLATE = """Create a professional-quality photorealistic image of a model showcasing a product.

## 1. Model (mandatory):
- Sex: {sex}
- Ethnic origin: {ethnic_origin} (facial features must be authentic)
- Skin tone: {skin_tone}
- Apparent age: {age}
- Body type: {body_type}
- Facial expression: {expression}

## 2. Product & style:
- Product: {product}.
- Overall clothing style: {style}.

## 3. Scene & pose:
- Pose: the model adopts the following pose: "{pose}". The pose must showcase the product.
- Ambiance & lighting: background and lighting must match "{ambiance}".

## 4. Technical quality:
- Quality: {quality}
- Format: square, high resolution."""


CAPTION_TEMPLATE = """Task: write an Instagram marketing caption.
Context: you are a digital marketing expert. Analyze the provided images to understand the product.
Instructions:
1. Write a short, punchy caption (2 sentences maximum) in {language}.
2. Use a style that is "{style}".
3. Adopt a tone that is "{tone}".
4. End with a clear call to action.
Reply with the final caption only."""


def build_image_prompt(options: ModelOptions, pose: str, product_description: str) -> str:
    """Build the image prompt for one pose.
    
    Uses the face-preserving template when `use_my_face` is set; the face
    image is then expected last in the image list.
    """
    product = product_description.strip() or "the product visible in the provided images"
    
    if options.use_my_face:
        return FACE_IMAGE_TEMPLATE.format(
            product=product,
            body_type=options.body_type,
            style=options.style,
            pose=pose,
            ambiance=options.ambiance,
            quality=QUALITY_NOTES,
        )
    
    return PERSONA_IMAGE_TEMPLATE.format(
        sex=options.sex,
        ethnic_origin=options.ethnic_origin,
        skin_tone=options.skin_tone,
        age=options.age,
        body_type=options.body_type,
        expression=options.expression,
        product=product,
        style=options.style,
        pose=pose,
        ambiance=options.ambiance,
        quality=QUALITY_NOTES,
    )


def build_caption_prompt(options: ModelOptions, language: str = "French") -> str:
    """Build the marketing caption prompt."""
    return CAPTION_TEMPLATE.format(
        language=language,
        style=options.style,
        tone=options.marketing_tone,
    )
