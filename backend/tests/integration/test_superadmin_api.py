"""
Integration tests for superadmin center provisioning.
"""

from models import ActorRole
from services import LinkGraph


def test_provision_center(client, db_session, make):
    superadmin = make.admin(role=ActorRole.SUPERADMIN)
    admin = make.admin()

    res = client.post("/api/superadmin/centers", json={"adminId": admin.id, "name": "مركز الفجر"},
                      headers=make.headers(superadmin))

    assert res.status_code == 201
    center_id = res.json()["center"]["id"]
    assert res.json()["center"]["adminId"] == admin.id
    db_session.refresh(admin)
    assert LinkGraph.center_of(db_session, admin).id == center_id


def test_provisioned_admin_can_use_admin_endpoints(client, make):
    superadmin = make.admin(role=ActorRole.SUPERADMIN)
    admin = make.admin()
    client.post("/api/superadmin/centers", json={"adminId": admin.id, "name": "مركز"},
                headers=make.headers(superadmin))

    res = client.get("/api/admin/center", headers=make.headers(admin))

    assert res.status_code == 200


def test_list_centers(client, make):
    superadmin = make.admin(role=ActorRole.SUPERADMIN)
    first = make.center()
    second = make.center()

    res = client.get("/api/superadmin/centers", headers=make.headers(superadmin))

    assert res.status_code == 200
    assert [c["id"] for c in res.json()["centers"]] == [first.id, second.id]


def test_center_admin_cannot_provision(client, make, center_setup):
    admin, _, _, _ = center_setup

    res = client.post("/api/superadmin/centers", json={"adminId": admin.id, "name": "X"},
                      headers=make.headers(admin))

    assert res.status_code == 403


def test_superadmin_is_not_center_scoped(client, make):
    superadmin = make.admin(role=ActorRole.SUPERADMIN)

    res = client.get("/api/admin/center", headers=make.headers(superadmin))

    assert res.status_code == 403


def test_provision_for_unknown_admin(client, make):
    superadmin = make.admin(role=ActorRole.SUPERADMIN)

    res = client.post("/api/superadmin/centers", json={"adminId": 99999, "name": "X"},
                      headers=make.headers(superadmin))

    assert res.status_code == 404
