from datetime import datetime, timedelta, timezone

import pytest

from khadamat.models import Category, Service

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_service(
    id,
    *,
    category_id=1,
    title="Service",
    desc="",
    price=100,
    days=0,
    stars=(),
    region_id=1,
):
    return Service.model_validate(
        {
            "id": id,
            "category_id": category_id,
            "title": title,
            "desc": desc,
            "price": price,
            "created_at": (BASE_TIME + timedelta(days=days)).isoformat(),
            "rates": [{"num_star": star} for star in stars],
            "profile": {"id": id, "user": {"id": id, "region_id": region_id}},
        }
    )


@pytest.fixture
def catalog_services():
    return [
        make_service(
            1,
            category_id=1,
            title="Plumber on call",
            desc="Leaks and pipes",
            price=50,
            days=1,
            stars=(5, 4),
            region_id=1,
        ),
        make_service(
            2,
            category_id=1,
            title="Bathroom renovation",
            desc="Tiles, PLUMBING and fixtures",
            price=300,
            days=3,
            stars=(3,),
            region_id=2,
        ),
        make_service(
            3,
            category_id=2,
            title="Math tutoring",
            desc="High school algebra",
            price=20,
            days=2,
            stars=(),
            region_id=1,
        ),
        make_service(
            4,
            category_id=3,
            title="House cleaning",
            desc="Weekly cleaning",
            price=80,
            days=0,
            stars=(2, 2, 3),
            region_id=14,
        ),
    ]


@pytest.fixture
def catalog_categories():
    return [
        Category(id=1, name="صيانة"),
        Category(id=2, name="تعليم"),
        Category(id=3, name="تنظيف"),
    ]
