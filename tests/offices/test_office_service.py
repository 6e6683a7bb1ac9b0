import pytest

from punchclock.core.enums import Role
from punchclock.core.exceptions import AuthorizationError, ValidationError
from punchclock.offices.service import OfficeNetworkService


@pytest.fixture
def service(office_repo):
    return OfficeNetworkService(office_repo)


def test_admin_registers_office_with_anchor(service, office_repo):
    office_id = service.register(
        current_role=Role.ADMIN,
        office_name="  Chi nhánh Quận 7 ",
        ip_address="198.51.100.20",
        latitude="10.7290",
        longitude="106.7190",
    )

    [office] = [o for o in office_repo.list_all() if o.ip_address == "198.51.100.20"]
    assert office.office_id == office_id
    assert office.office_name == "Chi nhánh Quận 7"
    assert office.anchor.latitude == pytest.approx(10.729)


def test_duplicate_ip_is_a_validation_error(service):
    with pytest.raises(ValidationError) as exc:
        service.register(current_role=Role.ADMIN, office_name="Again", ip_address="203.0.113.10")
    assert exc.value.code == "duplicate-office-ip"


@pytest.mark.parametrize(
    "kwargs,code",
    [
        ({"office_name": "", "ip_address": "198.51.100.20"}, "required"),
        ({"office_name": "X", "ip_address": "10.0.0"}, "invalid-ip"),
        ({"office_name": "X", "ip_address": "198.51.100.20", "latitude": "95"}, "invalid-geolocation"),
    ],
)
def test_register_validation(service, kwargs, code):
    with pytest.raises(ValidationError) as exc:
        service.register(current_role=Role.ADMIN, **kwargs)
    assert exc.value.code == code


def test_staff_cannot_manage_offices(service):
    with pytest.raises(AuthorizationError):
        service.register(current_role=Role.STAFF, office_name="X", ip_address="198.51.100.20")
    with pytest.raises(AuthorizationError):
        service.remove(current_role=Role.STAFF, office_id=1)


def test_remove_office(service, office_repo):
    service.remove(current_role=Role.ADMIN, office_id=1)

    assert office_repo.list_all() == []
    with pytest.raises(ValidationError) as exc:
        service.remove(current_role=Role.ADMIN, office_id=1)
    assert exc.value.code == "office-not-found"
