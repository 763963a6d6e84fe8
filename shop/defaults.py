"""Built-in catalog used to seed an empty store and as the offline fallback."""

from typing import List

from shop.config import SENTINEL_COLLECTION
from shop.models import Classification, Product, SiteConfig, SocialLink

__all__ = [
    "default_collections",
    "default_categories",
    "default_materials",
    "default_products",
    "default_site_config",
]

_COLLECTIONS = [
    (SENTINEL_COLLECTION, ""),
    ("Aurora", "Inspirada en el amanecer, piezas con acabados dorados y cálidos que iluminan."),
    ("Nocturna", "Elegancia misteriosa con tonos plateados, cristales y líneas geométricas modernas."),
    ("Orgánica", "Conexión con la naturaleza mediante formas irregulares, perlas y texturas crudas."),
]

# (id, name, category, collection, price, description, material)
_PRODUCTS = [
    ("1", "Gargantilla Solar", "Collares", "Aurora", "25.00 €",
     "Una pieza central radiante con acabado dorado mate. Perfecta para escotes profundos.",
     "Aleación de zinc con baño de oro 14k"),
    ("2", "Aretes Luna Creciente", "Aretes", "Nocturna", "15.00 €",
     "Diseño minimalista en forma de luna. Ligeros y elegantes para el uso diario.",
     "Acero inoxidable pulido"),
    ("3", "Pulsera Eslabón Grueso", "Pulseras", "Aurora", "18.00 €",
     "Una declaración de estilo audaz. Eslabones entrelazados con cierre invisible.",
     "Latón chapado en oro"),
    ("4", "Anillo Sello Botánico", "Anillos", "Orgánica", "12.00 €",
     "Grabado con motivos florales sutiles. Un toque vintage para manos modernas.",
     "Baño de plata envejecida"),
    ("5", "Collar Perla Irregular", "Collares", "Orgánica", "22.00 €",
     "Cadena fina con una perla de río central de forma orgánica. Delicadeza pura.",
     "Perla de río y cadena dorada"),
    ("6", "Aretes Gota de Lluvia", "Aretes", "Nocturna", "14.00 €",
     "Cristal facetado transparente que atrapa la luz maravillosamente.",
     "Cristal y poste hipoalergénico"),
    ("7", "Brazalete Rígido Minimal", "Pulseras", "Aurora", "16.00 €",
     "Líneas limpias y estructura abierta. Ideal para combinar con otros brazaletes.",
     "Acero inoxidable dorado"),
    ("8", "Set de Anillos Midi", "Anillos", "Nocturna", "10.00 €",
     "Juego de 3 anillos finos para usar en diferentes falanges.",
     "Aleación mixta plateada"),
    ("9", "Collar Cascadas", "Collares", "Aurora", "30.00 €",
     "Múltiples capas de cadenas finas que crean un efecto de cascada elegante.",
     "Baño de oro rosa"),
    ("10", "Aretes Aro Geométrico", "Aretes", "Nocturna", "17.00 €",
     "Una reinterpretación moderna del clásico aro con ángulos definidos.",
     "Acetato y metal"),
    ("11", "Colgante Hoja Real", "Collares", "Orgánica", "24.00 €",
     "Una hoja real metalizada, preservando sus nervaduras naturales únicas.",
     "Baño de oro mate"),
]


def default_collections() -> List[Classification]:
    """Default collections, sentinel first."""
    return [Classification(name=name, description=desc) for name, desc in _COLLECTIONS]


def default_products() -> List[Product]:
    return [
        Product(
            id=pid,
            name=name,
            category=category,
            collection=collection,
            price=price,
            description=description,
            material=material,
            image_url=f"https://picsum.photos/seed/j{pid}/600/800",
        )
        for pid, name, category, collection, price, description, material in _PRODUCTS
    ]


def _distinct(values: List[str]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return sorted(seen)


def default_categories() -> List[Classification]:
    """Categories used by the default products, sorted by name."""
    return [Classification(name=n) for n in _distinct([p[2] for p in _PRODUCTS])]


def default_materials() -> List[Classification]:
    """Materials used by the default products, sorted by name."""
    return [Classification(name=n) for n in _distinct([p[6] for p in _PRODUCTS])]


def default_site_config() -> SiteConfig:
    return SiteConfig(
        site_name="Catálogo",
        logo_url=None,
        footer_text="© 2024. Todos los derechos reservados.",
        social_links=[
            SocialLink(platform="Instagram", url="#"),
            SocialLink(platform="Pinterest", url="#"),
            SocialLink(platform="Contacto", url="mailto:hola@thebrightsoul.com"),
        ],
    )
