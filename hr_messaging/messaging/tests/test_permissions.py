import pytest

from hr_messaging.messaging.permissions import RULES
from hr_messaging.messaging.permissions import RuleName
from hr_messaging.messaging.permissions import is_head_of_department
from hr_messaging.messaging.permissions import resolve
from tests.factories import make_employee

pytestmark = pytest.mark.django_db


def test_rules_are_evaluated_in_documented_order():
    assert [rule for rule, _ in RULES] == [
        RuleName.ADMIN_ACCESS,
        RuleName.HR_ACCESS,
        RuleName.CONTACT_HR,
        RuleName.DIRECT_MANAGER,
        RuleName.SAME_DEPARTMENT,
        RuleName.DIRECT_REPORT,
        RuleName.MANAGER_TO_MANAGER,
        RuleName.HOD_TO_HOD,
        RuleName.HOD_TO_MANAGEMENT,
    ]


def test_engineering_scenario(org):
    e1 = org.e1.employee

    verdict = resolve(e1, org.e2.employee)
    assert verdict.allowed
    assert verdict.matched_rule == RuleName.SAME_DEPARTMENT

    verdict = resolve(e1, org.h1.employee)
    assert verdict.allowed
    assert verdict.matched_rule == RuleName.CONTACT_HR

    # The manager shares the department too; the earlier rule wins.
    verdict = resolve(e1, org.manager.employee)
    assert verdict.allowed
    assert verdict.matched_rule == RuleName.DIRECT_MANAGER

    verdict = resolve(e1, org.s1.employee)
    assert not verdict.allowed
    assert verdict.matched_rule is None
    assert "Engineering" in verdict.reason
    assert verdict.suggestion


def test_manager_to_own_report_in_same_department(org):
    # Shared department outranks both direct_report and manager_to_manager.
    verdict = resolve(org.manager.employee, org.e1.employee)
    assert verdict.allowed
    assert verdict.matched_rule == RuleName.SAME_DEPARTMENT


def test_admin_reaches_everyone(org):
    admin = org.admin.employee
    for target in (org.s1, org.e1, org.director, org.h2):
        verdict = resolve(admin, target.employee)
        assert verdict.matched_rule == RuleName.ADMIN_ACCESS


def test_hr_reaches_everyone(org):
    verdict = resolve(org.h1.employee, org.s1.employee)
    assert verdict.matched_rule == RuleName.HR_ACCESS


def test_anyone_can_contact_hr(org):
    verdict = resolve(org.s1.employee, org.h2.employee)
    assert verdict.matched_rule == RuleName.CONTACT_HR


def test_hr_department_name_is_case_insensitive(db, settings):
    settings.MESSAGING_HR_DEPARTMENT_NAMES = ["Human Resources"]
    hr = make_employee("people_partner", department="human resources")
    other = make_employee("worker", department="Finance")
    assert resolve(other, hr).matched_rule == RuleName.CONTACT_HR


def test_direct_report_in_another_department(org):
    remote = make_employee(
        "remote_dev",
        department="Remote",
        line_manager=org.manager.employee,
    )
    verdict = resolve(org.manager.employee, remote)
    assert verdict.matched_rule == RuleName.DIRECT_REPORT


def test_managers_reach_each_other(org):
    verdict = resolve(org.manager.employee, org.sales_manager.employee)
    assert verdict.matched_rule == RuleName.MANAGER_TO_MANAGER


def test_head_of_department_reaches_management_role(org):
    # The admin manages nobody, so only the management-role rule applies.
    verdict = resolve(org.manager.employee, org.admin.employee)
    assert verdict.matched_rule == RuleName.HOD_TO_MANAGEMENT


def test_regular_employee_cannot_reach_skip_level(org):
    verdict = resolve(org.e1.employee, org.director.employee)
    assert not verdict.allowed


def test_denial_without_department_mentions_none(org):
    loner = make_employee("loner")
    verdict = resolve(loner, org.s1.employee)
    assert not verdict.allowed
    assert "(none)" in verdict.reason


def test_verdict_as_dict(org):
    allowed = resolve(org.e1.employee, org.e2.employee).as_dict()
    assert allowed == {"allowed": True, "matched_rule": "same_department"}

    denied = resolve(org.e1.employee, org.s1.employee).as_dict()
    assert denied["allowed"] is False
    assert denied["matched_rule"] is None
    assert set(denied) == {"allowed", "matched_rule", "reason", "suggestion"}


class TestHeadOfDepartment:
    def test_top_of_department_chain(self, org):
        assert is_head_of_department(org.manager.employee)
        assert is_head_of_department(org.director.employee)

    def test_without_reports(self, org):
        assert not is_head_of_department(org.e1.employee)
        assert not is_head_of_department(org.admin.employee)

    def test_manager_reporting_inside_own_department(self, org):
        lead = make_employee(
            "lead",
            department="Engineering",
            line_manager=org.manager.employee,
        )
        make_employee("junior", department="Engineering", line_manager=lead)
        assert not is_head_of_department(lead)

    def test_missing_department_never_matches_manager(self, db):
        boss = make_employee("boss")
        middle = make_employee("middle", line_manager=boss)
        make_employee("report", line_manager=middle)
        # Neither has a department, which does not count as sharing one.
        assert is_head_of_department(middle)
