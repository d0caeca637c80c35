"""Curated UK B Corporation directory.

Certified B Corps in sectors an ESG search touches: consulting, finance,
energy, communications and professional services. A company that is both
a B Corp and a verified sponsor is flagged as a golden opportunity.

To update: https://www.bcorporation.net/en-us/find-a-b-corp/
"""
from __future__ import annotations

from datetime import timedelta
from pathlib import Path

from jobboard.config import BCORP_CACHE_PATH
from jobboard.log import get_logger
from jobboard.registry import RegistrySnapshot, cache_age, read_cache, write_cache

log = get_logger(__name__)

NAME = "bcorp_directory"
MAX_AGE = timedelta(days=7)

UK_BCORPS: tuple[str, ...] = (
    # Sustainability consulting & advisory
    "Anthesis Group", "Anthesis",
    "Corporate Citizenship",
    "Futerra", "Futerra Sustainability Communications",
    "Salterbaxter",
    "Article 13",
    "Eunomia Research & Consulting", "Eunomia",
    "BioRegional", "Bioregional Development Group",
    "Carbon Intelligence",
    "Greenstone",
    "South Pole", "South Pole Group",
    "Volans",
    "SystemIQ",
    "Julie's Bicycle",
    "Ashden",
    "Plan Vivo",
    "Global Action Plan",
    "Change by Degrees",
    "Carnstone Partners", "Carnstone",
    "Sancroft International", "Sancroft",
    "Ricardo", "Ricardo Energy & Environment",
    "Cundall", "Cundall Johnston & Partners",
    "Elementa Consulting", "Elementa",
    "Hoare Lea",
    "Useful Simple Projects",
    "Metabolic",
    "Avieco",
    "Forum for the Future",
    "BSR",
    "The Good Economy",
    "Turley",
    "Thirdway",
    "Temple Group",
    "Action Sustainability",
    "Greenomy",
    "Longevity Partners",
    "Accenture Development Partnerships",
    # Communications, design & creative
    "Seismic",
    "Radley Yeldar",
    "Context", "Context Group",
    "Flag",
    "The Crowd",
    "Leap Design",
    "Wholegrain Digital",
    "Reason Digital",
    "Torchbox",
    "Do Nation",
    "Positive News",
    "Don't Cry Wolf",
    "Fieldcraft Studios",
    "Nice and Serious",
    # Financial services & impact investment
    "Triodos Bank", "Triodos",
    "EQ Investors",
    "Abundance Investment", "Abundance",
    "Castlefield",
    "Big Issue Invest",
    "Bridges Fund Management", "Bridges Ventures",
    "Finance Earth",
    "Social Finance",
    "Big Society Capital",
    "Ethex",
    "Impax Asset Management", "Impax",
    "Wheb Asset Management", "WHEB",
    "Shared Interest",
    # Energy & utilities
    "Good Energy",
    "Octopus Energy",
    "OVO Energy",
    "Ecotricity",
    "Bulb", "Bulb Energy",
    "Ripple Energy",
    "Pure Planet",
    # Built environment & engineering
    "Willmott Dixon",
    "Max Fordham",
    "Buro Happold",
    "Igloo Regeneration",
    "Expedition Engineering",
    "Architype",
    "Feilden Clegg Bradley Studios",
    # Recruitment & HR
    "Acre", "Acre Resources",
    "Allen & York",
    "Escape the City",
    "Bruntwood",
    # Consumer, food & retail
    "innocent", "innocent drinks",
    "The Body Shop",
    "Patagonia",
    "Cook Trading", "COOK",
    "Abel & Cole",
    "Pukka Herbs",
    "Ella's Kitchen",
    "Danone", "Danone UK",
    "Ben & Jerry's",
    "Tony's Chocolonely",
    "Lush", "Lush Cosmetics",
    "Fairphone",
    "Toast Ale",
    "Oddbox",
    "Riverford",
    "The Big Issue",
    "Who Gives A Crap",
    "Allbirds",
    "Divine Chocolate",
    "Cafedirect",
    "Traidcraft",
    # Tech & software
    "Ecosia",
    "Provenance",
    "Wagestream",
    "Social Value Portal",
    "OpenCorporates",
    "CoGo",
    "Goodbox",
    # Media
    "Guardian Media Group", "The Guardian",
    "Ethical Consumer",
    "Green Building Press",
    # Other
    "Nourish",
    "Social Enterprise UK",
    "UnLtd",
    "Power to Change",
    "Interface",
    "Naturesave Insurance",
    "Green Building Store",
    "Suma Wholefoods", "Suma",
    "Better Food",
    "Pact Coffee",
    "graze",
)


def load_bcorp_directory(cache_path: Path = BCORP_CACHE_PATH) -> RegistrySnapshot:
    age = cache_age(cache_path)
    if age is not None and age < MAX_AGE:
        cached = read_cache(cache_path)
        names = cached.get("names") if cached else None
        if isinstance(names, list):
            snapshot = RegistrySnapshot.from_names(NAME, names)
            log.info("Loaded %d B Corps from cache", len(snapshot))
            return snapshot

    snapshot = RegistrySnapshot.from_names(NAME, list(UK_BCORPS))
    write_cache(cache_path, {
        "names": list(UK_BCORPS),
        "updated_at": snapshot.loaded_at.isoformat(),
        "count": len(snapshot),
    })
    log.info("Loaded %d UK B Corps", len(snapshot))
    return snapshot
