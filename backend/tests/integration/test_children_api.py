"""
Integration tests for the children endpoints and their link-graph access rules.
"""

from services import LinkGraph


def _create(client, headers, **overrides):
    body = {"name": "Omar", "age": 4, "gender": "male"}
    body.update(overrides)
    return client.post("/api/children", json=body, headers=headers)


class TestCreateChild:

    def test_parent_creates_child(self, client, make):
        parent = make.parent()

        res = _create(client, make.headers(parent), targetLetters=["ر"])

        assert res.status_code == 201
        child = res.json()["child"]
        assert child["parentId"] == parent.id
        assert child["childCode"] == "CH-0001"
        assert child["avatarId"] == "avatar_01"
        assert child["targetLetters"] == ["ر"]
        assert child["parent"]["id"] == parent.id

    def test_unverified_parent_blocked(self, client, make):
        parent = make.parent(verified=False)

        res = _create(client, make.headers(parent))

        assert res.status_code == 403
        assert res.json()["message"] == "Email verification required to access this resource"

    def test_specialist_cannot_create(self, client, make):
        res = _create(client, make.headers(make.specialist()))

        assert res.status_code == 403
        assert res.json()["message"] == "Not authorized"

    def test_age_out_of_range(self, client, make):
        res = _create(client, make.headers(make.parent()), age=9)

        assert res.status_code == 400
        assert res.json()["success"] is False

    def test_parent_id_in_body_is_ignored(self, client, make):
        caller = make.parent()
        other = make.parent()

        res = _create(client, make.headers(caller), parentId=other.id)

        assert res.json()["child"]["parentId"] == caller.id


class TestListChildren:

    def test_parent_sees_own_children(self, client, make):
        parent = make.parent()
        own = make.child(parent)
        make.child(make.parent())

        res = client.get("/api/children", headers=make.headers(parent))

        assert res.status_code == 200
        assert res.json()["count"] == 1
        assert [c["id"] for c in res.json()["children"]] == [own.id]

    def test_specialist_sees_assigned_and_linked(self, client, db_session, make):
        specialist = make.specialist()
        linked_parent = make.parent()
        via_link = make.child(linked_parent)
        assigned = make.child(make.parent())
        make.child(make.parent())
        make.link(linked_parent, specialist)
        LinkGraph.assign_child_to_specialist(db_session, assigned, specialist)

        res = client.get("/api/children", headers=make.headers(specialist))

        assert {c["id"] for c in res.json()["children"]} == {via_link.id, assigned.id}

    def test_admin_cannot_list(self, client, make, center_setup):
        admin, _, _, _ = center_setup

        res = client.get("/api/children", headers=make.headers(admin))

        assert res.status_code == 403


class TestGetChild:

    def test_owner_reads_child(self, client, make):
        parent = make.parent()
        child = make.child(parent)

        res = client.get(f"/api/children/{child.id}", headers=make.headers(parent))

        assert res.status_code == 200
        assert res.json()["child"]["id"] == child.id

    def test_other_parent_denied(self, client, make):
        child = make.child(make.parent())

        res = client.get(f"/api/children/{child.id}", headers=make.headers(make.parent()))

        assert res.status_code == 403

    def test_unknown_child(self, client, make):
        res = client.get("/api/children/99999", headers=make.headers(make.parent()))

        assert res.status_code == 404
        assert res.json()["message"] == "Child not found"

    def test_admin_reads_center_child(self, client, db_session, make, center_setup):
        admin, _, specialist, _ = center_setup
        child = make.child(make.parent())
        LinkGraph.assign_child_to_specialist(db_session, child, specialist)

        res = client.get(f"/api/children/{child.id}", headers=make.headers(admin))

        assert res.status_code == 200
        assert res.json()["child"]["assignedSpecialist"]["id"] == specialist.id

    def test_admin_denied_outside_center(self, client, make, center_setup):
        admin, _, _, _ = center_setup
        child = make.child(make.parent())

        res = client.get(f"/api/children/{child.id}", headers=make.headers(admin))

        assert res.status_code == 403


class TestUpdateChild:

    def test_owner_updates(self, client, make):
        parent = make.parent()
        child = make.child(parent)

        res = client.put(f"/api/children/{child.id}", json={"dailyPlayDuration": 20},
                         headers=make.headers(parent))

        assert res.status_code == 200
        assert res.json()["child"]["dailyPlayDuration"] == 20

    def test_linked_specialist_updates(self, client, make):
        specialist = make.specialist()
        parent = make.parent()
        child = make.child(parent)
        make.link(parent, specialist)

        res = client.put(f"/api/children/{child.id}", json={"difficultyLevel": "advanced"},
                         headers=make.headers(specialist))

        assert res.status_code == 200
        assert res.json()["child"]["difficultyLevel"] == "advanced"

    def test_unlinked_specialist_denied(self, client, make):
        child = make.child(make.parent())

        res = client.put(f"/api/children/{child.id}", json={"name": "X"},
                         headers=make.headers(make.specialist()))

        assert res.status_code == 403

    def test_admin_cannot_update(self, client, db_session, make, center_setup):
        admin, _, specialist, _ = center_setup
        child = make.child(make.parent())
        LinkGraph.assign_child_to_specialist(db_session, child, specialist)

        res = client.put(f"/api/children/{child.id}", json={"name": "X"}, headers=make.headers(admin))

        assert res.status_code == 403
