"""
Bundled University Catalog.

Shown when the universities endpoint is unreachable or returns nothing,
so the public catalog never renders empty.
"""

from __future__ import annotations

from typing import Optional, Union

from portal.models.catalog import University

FALLBACK_UNIVERSITIES: tuple[University, ...] = (
    University(
        university_id=1,
        name="Chuvash State Pedagogical University",
        location="Cheboksary, Russia",
        description="A leading pedagogical university offering comprehensive programs...",
        website="https://chgpu.edu.ru/",
        established="1930",
        students="15000+",
        rating=4.5,
    ),
    University(
        university_id=2,
        name="Samara National Research University",
        location="Samara, Russia",
        description="A prestigious national research university known for aerospace...",
        website="https://ssau.ru/",
        established="1918",
        students="20000+",
        rating=4.7,
    ),
    University(
        university_id=3,
        name="Yaroslavl State Technical University (YSTU)",
        location="Yaroslavl, Russia",
        description="A technical university specializing in engineering, architecture...",
        website="https://www.ystu.ru/",
        established="1944",
        students="12000+",
        rating=4.3,
    ),
    University(
        university_id=4,
        name="Chuvash State Agrarian University",
        location="Cheboksary, Russia",
        description="Specialized university focusing on agricultural sciences...",
        website="http://www.agro.chuvash.ru/",
        established="1931",
        students="10000+",
        rating=4.2,
    ),
    University(
        university_id=5,
        name="Lobachevsky State University of Nizhny Novgorod (UNN)",
        location="Nizhny Novgorod, Russia",
        description="One of Russia's oldest and most prestigious universities...",
        website="http://www.unn.ru/",
        established="1916",
        students="40000+",
        rating=4.6,
    ),
    University(
        university_id=6,
        name="Kazan Innovative University",
        location="Kazan, Russia",
        description="A modern university combining traditional education...",
        website="https://ieml.ru/",
        established="1994",
        students="18000+",
        rating=4.4,
    ),
)


def get_university_by_id(university_id: Union[int, str]) -> Optional[University]:
    return next(
        (u for u in FALLBACK_UNIVERSITIES if str(u.university_id) == str(university_id)),
        None,
    )
