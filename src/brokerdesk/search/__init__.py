"""
Resolución de consultas de propiedades.

Extrae criterios del texto, busca propiedades aprobadas y arma la
respuesta para el interesado.
"""

from brokerdesk.search.criteria_extractor import CriteriaExtractor
from brokerdesk.search.lookup import PropertyLookup, matches_criteria
from brokerdesk.search.formatter import ResponseFormatter, pluralize

__all__ = [
    "CriteriaExtractor",
    "PropertyLookup",
    "matches_criteria",
    "ResponseFormatter",
    "pluralize",
]
