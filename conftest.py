from datetime import date
from types import SimpleNamespace

import pytest
from rest_framework.test import APIClient

from tests.factories import create_employee


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def org(db):
    """A small organization with two reporting chains and an HR team.

    Executive: director (Director), heads both Engineering and Sales.
    Engineering: manager -> e1, e2.
    Sales: sales_manager -> s1.
    HR: h1 (senior), h2.
    Operations: admin (Admin role), no manager.
    """

    director = create_employee("director", department="Executive", role="Director")
    manager = create_employee(
        "manager",
        department="Engineering",
        role="Engineering Manager",
        line_manager=director.employee,
        first_name="Maya",
        last_name="Manager",
    )
    e1 = create_employee(
        "e1",
        department="Engineering",
        role="Engineer",
        line_manager=manager.employee,
        first_name="Eli",
        last_name="One",
    )
    e2 = create_employee(
        "e2",
        department="Engineering",
        role="Engineer",
        line_manager=manager.employee,
    )
    sales_manager = create_employee(
        "sales_manager",
        department="Sales",
        role="Sales Manager",
        line_manager=director.employee,
    )
    s1 = create_employee(
        "s1",
        department="Sales",
        role="Sales Representative",
        line_manager=sales_manager.employee,
    )
    h1 = create_employee(
        "h1",
        department="HR",
        role="HR Officer",
        join_date=date(2015, 3, 1),
    )
    h2 = create_employee(
        "h2",
        department="HR",
        role="HR Officer",
        join_date=date(2020, 6, 1),
    )
    admin = create_employee("admin", department="Operations", role="Admin")
    return SimpleNamespace(
        director=director,
        manager=manager,
        e1=e1,
        e2=e2,
        sales_manager=sales_manager,
        s1=s1,
        h1=h1,
        h2=h2,
        admin=admin,
    )
