"""Pose Selector - picks a fixed set of five poses from the product description."""

POSE_COUNT = 5

JEWELRY_POSES = [
    "Gros plan sur le poignet pour une montre ou un bracelet, visage en arrière-plan flou.",
    "Main posée délicatement sur le cou pour mettre en valeur un collier.",
    "Portrait en gros plan, main près de l'oreille pour montrer des boucles d'oreilles.",
    "Main posée nonchalamment sur le menton, exposant une bague.",
    "Le modèle ajuste son col de chemise, rendant un bijou de poignet bien visible.",
]

SHOE_POSES = [
    "Une jambe croisée sur l'autre en position assise, gros plan sur la chaussure.",
    "Le modèle fait un pas en avant, caméra au niveau du sol.",
    "Adossé à un mur, une jambe pliée, la semelle visible.",
    "Assis sur des marches, les pieds au premier plan pour un look urbain.",
    "En train de sauter, montrant la flexibilité de la chaussure.",
]

BAG_POSES = [
    "Le sac tenu à la main, bras le long du corps, vue de face.",
    "Le sac porté à l'épaule, le modèle de trois-quarts pour montrer comment il tombe.",
    "Le modèle en train de marcher, le sac en mouvement naturel.",
    "Gros plan sur le sac posé à côté du modèle assis.",
    "En bandoulière, le modèle interagissant avec le sac.",
]

EYEWEAR_POSES = [
    "Portrait de face, le modèle ajustant les lunettes sur son nez.",
    "Profil du visage, pour montrer le design des branches.",
    "Le modèle regarde au loin, donnant un aspect naturel.",
    "Vue de dessus, le modèle regardant vers le haut, créant un effet dramatique.",
    "Le modèle tenant les lunettes à la main, regard pensif.",
]

COSMETIC_POSES = [
    "Portrait beauté en gros plan, mettant en valeur le maquillage (lèvres, yeux).",
    "Le modèle appliquant délicatement le produit (crème, sérum) sur son visage.",
    "Main tenant le flacon du produit près du visage, focus sur le packaging.",
    "Sourire radieux montrant un teint parfait.",
    "Vue de profil pour mettre en avant un highlighter sur les pommettes.",
]

CLOTHING_POSES = [
    "Pose de face, naturelle et élégante, regardant la caméra avec confiance.",
    "De trois-quarts, une main sur la hanche, mettant en valeur la coupe du vêtement.",
    "En mouvement, comme si le modèle marchait nonchalamment vers la caméra.",
    "Assis sur un cube simple, coude sur le genou, pose décontractée mais chic.",
    "De dos, regardant par-dessus l'épaule, pour montrer les détails arrière.",
]

DEFAULT_POSES = [
    "Pose de face, naturelle et élégante, regardant la caméra avec confiance.",
    "De trois-quarts, une main sur la hanche, pour un look classique.",
    "En mouvement, comme si le modèle marchait nonchalamment vers la caméra.",
    "Assis sur un cube simple, coude sur le genou, pose décontractée.",
    "Portrait en buste, regard direct et confiant.",
]

# First matching group wins, so table order is precedence order.
POSE_TABLE: list[tuple[tuple[str, ...], list[str]]] = [
    (("montre", "bijou", "bracelet", "bague", "collier", "boucle d'oreille", "pendentif",
      "watch", "jewel", "necklace", "earring"), JEWELRY_POSES),
    (("chaussure", "basket", "sneaker", "botte", "escarpin", "sandale", "mocassin",
      "shoe", "boot", "heel"), SHOE_POSES),
    (("sac", "pochette", "cabas", "handbag", "purse", "backpack", "tote"), BAG_POSES),
    (("lunette", "glasses", "eyewear"), EYEWEAR_POSES),
    (("cosmétique", "maquillage", "rouge à lèvres", "crème", "sérum", "parfum", "mascara",
      "cosmetic", "makeup", "lipstick", "serum", "perfume"), COSMETIC_POSES),
    (("vêtement", "robe", "chemise", "pantalon", "jupe", "veste", "manteau", "pull",
      "t-shirt", "blouse", "jean", "dress", "shirt", "jacket", "skirt", "coat", "sweater"),
     CLOTHING_POSES),
]


def select_poses(product_description: str) -> list[str]:
    """Return exactly five pose instructions for a product description.
    
    Case-insensitive substring match against POSE_TABLE; no match (or an
    empty description) yields DEFAULT_POSES. Always returns a new list.
    """
    desc_lower = (product_description or "").lower()
    
    for keywords, poses in POSE_TABLE:
        if any(keyword in desc_lower for keyword in keywords):
            return list(poses[:POSE_COUNT])
    
    return list(DEFAULT_POSES[:POSE_COUNT])
