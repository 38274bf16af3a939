"""
Sector taxonomies: departments and demand-item categories.

Configuration data feeding the prompt's candidate-item hints and the
``/sectors`` listing. Filter values outside these lists are still allowed;
they are passed to the model as free-text hints.
"""

from __future__ import annotations

from dataclasses import dataclass

from sectorcast.forecasting.models import Sector


@dataclass(frozen=True, slots=True)
class SectorTaxonomy:
    name: str
    departments: tuple[str, ...]
    categories: tuple[str, ...]
    focus: str  # one-line brief of what "demand items" means for this sector

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "departments": list(self.departments),
            "categories": list(self.categories),
            "focus": self.focus,
        }


TAXONOMIES: dict[Sector, SectorTaxonomy] = {
    Sector.HEALTHCARE: SectorTaxonomy(
        "Healthcare",
        (
            "Emergency Department", "Respiratory Department", "Cardiac Department",
            "Neurology Department", "Orthopedic Department", "Pediatric Department",
            "General Medicine", "Surgery Department", "Intensive Care Unit",
        ),
        (
            "Medicines", "Test Kits", "Diagnostic Kits", "Medical Equipment",
            "Surgical Supplies", "Patient Care Items",
        ),
        "medicines, diagnostics and medical supplies used by hospitals and pharmacies",
    ),
    Sector.AUTOMOBILE: SectorTaxonomy(
        "Automobile",
        (
            "Sales Department", "Service Department", "Parts Department",
            "Manufacturing Department", "Quality Control", "Research & Development",
        ),
        ("Vehicles", "Spare Parts", "Accessories", "Service Equipment", "Safety Equipment"),
        "vehicle models, spare parts and accessories sold by dealers and workshops",
    ),
    Sector.AGRICULTURE: SectorTaxonomy(
        "Agriculture",
        (
            "Crop Production", "Animal Husbandry", "Farm Management",
            "Irrigation Department", "Pest Control", "Soil Management",
        ),
        ("Seeds", "Fertilizers", "Pesticides", "Farm Equipment", "Irrigation Equipment"),
        "crop inputs, seeds and farm equipment bought by farmers",
    ),
    Sector.RETAIL: SectorTaxonomy(
        "Retail",
        (
            "Fashion & Apparel", "Electronics & Tech", "Home & Garden",
            "Food & Beverages", "Sports & Fitness", "Beauty & Personal Care",
        ),
        ("Consumer Goods", "Electronics", "Clothing", "Food Products", "Home Appliances"),
        "consumer products stocked by retail stores",
    ),
    Sector.ENERGY: SectorTaxonomy(
        "Energy",
        (
            "Renewable Energy", "Traditional Power", "Energy Storage",
            "Grid Management", "Energy Efficiency", "Oil & Gas",
        ),
        ("Solar Equipment", "Wind Equipment", "Energy Storage", "Grid Infrastructure", "Fuel Products"),
        "energy equipment and fuel products used by utilities, businesses and households",
    ),
}


def taxonomy_for(sector: Sector | str) -> SectorTaxonomy:
    return TAXONOMIES[Sector(sector)]
