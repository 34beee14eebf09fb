"""Static neighborhood to delivery-zone table"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional


@dataclass(frozen=True)
class DeliveryZone:
    code: str
    name: str
    description: str
    fee: Decimal
    radius_km: float  # nominal outer radius, used for ETA estimates


DELIVERY_ZONES: Dict[str, DeliveryZone] = {
    "S": DeliveryZone("S", "Super Local", "Mesmo bairro da adega (até ~1 km)", Decimal("4.00"), 1.0),
    "A": DeliveryZone("A", "Muito Próximos", "Bairros imediatamente ao redor", Decimal("6.90"), 2.0),
    "B": DeliveryZone("B", "Próximos", "Raio aproximado 2-4 km", Decimal("8.90"), 4.0),
    "C": DeliveryZone("C", "Médios", "Raio aproximado 4-6 km", Decimal("11.90"), 6.0),
    "D": DeliveryZone("D", "Mais Distantes", "Regiões de médio-longo alcance 6-8 km", Decimal("14.90"), 8.0),
    "E": DeliveryZone("E", "Limite / Padrão", "Regiões distantes, fora do raio padrão", Decimal("19.90"), 10.0),
}

NEIGHBORHOODS: Dict[str, List[str]] = {
    "S": [
        "Vila da Saúde",
    ],
    "A": [
        "Saúde",
        "Bosque da Saúde",
        "Mirandópolis",
        "Vila Clementino",
        "Chácara Inglesa",
        "Planalto Paulista",
        "Vila Monte Alegre",
        "Vila Guarani (ZS)",
        "Vila Caraguatá",
        "Vila das Mercês (parte alta)",
        "Jardim Oriental",
        "Jardim Aeroporto (parte norte)",
        "Vila Fachini",
        "Vila Santa Catarina (parte alta)",
    ],
    "B": [
        "Vila Mariana",
        "Chácara Klabin",
        "Vila Gumercindo",
        "Vila Caravelas",
        "Vila Brasilina",
        "Cursino",
        "Sacomã",
        "Vila Liviero",
        "São João Clímaco",
        "Jardim Celeste",
        "Jardim da Glória",
        "Jardim Previdência",
        "Jardim Clímax",
        "Jardim Patente",
        "Vila Moraes",
        "Vila Firmiano Pinto",
        "Vila Monumento",
        "Ipiranga (parte oeste)",
        "Jardim Sandra",
        "Jardim Santa Cruz (ZS)",
        "Alto do Ipiranga",
    ],
    "C": [
        "Jabaquara",
        "Cidade Vargas",
        "Americanópolis",
        "Vila Mascote",
        "Brooklin Novo (lado norte)",
        "Campo Belo (parte inicial)",
        "Moema",
        "Cambuci",
        "Aclimação",
        "Liberdade",
        "Ipiranga (parte leste)",
        "Vila Prudente",
        "Vila Alpina (parte alta)",
        "Vila Zelina",
        "Vila Bela",
        "Vila Ema",
        "Parque da Mooca",
        "Jardim Avelino",
    ],
    "D": [
        "Heliópolis",
        "Parque Bristol",
        "Parque Fongaro",
        "Jardim Patente (leste)",
        "Vila Arapuá",
        "São João Clímaco profundo",
        "Vila São José (IP)",
        "Vila Carioca",
        "Vila Independência",
        "Mooca (parte leste)",
        "Tatuapé (parte oeste)",
        "Água Rasa",
        "Parque São Lucas",
        "Jardim Independência",
        "Sapopemba (regiões próximas)",
    ],
    "E": [
        "Brás",
        "Bela Vista",
        "Centro",
        "Sé",
        "Consolação",
        "Santa Cecília",
        "República",
        "Bom Retiro",
        "Barra Funda",
        "Brooklin Inteiro",
        "Santo Amaro",
        "Campo Grande",
        "Socorro",
        "Moema (parte profunda)",
        "Itaim Bibi",
        "Vila Olímpia",
        "Pinheiros",
        "Vila Madalena",
        "Perdizes",
        "Lapa",
        "Santana",
        "Tatuapé (profundo)",
        "São Caetano do Sul (borda)",
        "Diadema (borda da divisa)",
    ],
}

DELIVERY_FEE_WARNING = (
    "Atenção: Se o bairro informado estiver incorreto, a taxa de entrega "
    "será recalculada pela nossa equipe antes do envio."
)

_ZONE_BY_NEIGHBORHOOD = {
    name.lower(): code
    for code, names in NEIGHBORHOODS.items()
    for name in names
}


def zone_for_neighborhood(neighborhood: str) -> Optional[DeliveryZone]:
    """Exact, case-insensitive match on the neighborhood name"""
    if not neighborhood:
        return None
    code = _ZONE_BY_NEIGHBORHOOD.get(neighborhood.strip().lower())
    if code is None:
        return None
    return DELIVERY_ZONES[code]


def fee_for_neighborhood(neighborhood: str) -> Optional[Decimal]:
    zone = zone_for_neighborhood(neighborhood)
    return zone.fee if zone else None


def neighborhoods_by_zone(code: str) -> List[str]:
    return list(NEIGHBORHOODS.get(code, []))
