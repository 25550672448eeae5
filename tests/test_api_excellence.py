"""
API tests for the Path to Excellence blueprint.

Covers every endpoint under /api/v1/excellence, the error body contract
({"error", "code", "details"}) and tenant_id handling.
"""

import pytest

BASE = "/api/v1/excellence"


def _toggle(client, tenant_id, phase, item_id, **body):
    return client.post(
        f"{BASE}/phases/{phase}/checklist/{item_id}/toggle",
        json={"tenant_id": tenant_id, **body},
    )


class TestCatalogEndpoints:
    """Static catalog data."""

    def test_catalog_lists_seven_phases(self, client):
        res = client.get(f"{BASE}/catalog")
        assert res.status_code == 200
        phases = res.get_json()["phases"]
        assert [p["number"] for p in phases] == [0, 1, 2, 3, 4, 5, 6]
        assert phases[1]["title"] == "Equipment Criticality Assessment"
        assert phases[0]["checklist"][0]["form_type"] == "process_assessment"

    def test_catalog_without_checklists(self, client):
        res = client.get(f"{BASE}/catalog?include_checklist=false")
        phase = res.get_json()["phases"][2]
        assert "checklist" not in phase
        assert phase["checklist_count"] == 22

    def test_assessment_template(self, client):
        res = client.get(f"{BASE}/assessment/template")
        assert res.status_code == 200
        data = res.get_json()
        assert len(data["items"]) == 23
        assert data["max_score"] == 100
        assert all(i["actual_score"] == 0 for i in data["items"])


class TestProgressEndpoints:
    """Progress reads and checklist writes."""

    def test_tenant_id_required(self, client):
        res = client.get(f"{BASE}/progress")
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_REQUIRED"

    def test_get_progress(self, client, tenant_id):
        res = client.get(f"{BASE}/progress?tenant_id={tenant_id}")
        assert res.status_code == 200
        data = res.get_json()
        assert data["current_phase"] == 1
        assert data["overall_progress"] == 0
        assert data["phases"][1]["available_transitions"] == ["toggle"]

    def test_toggle(self, client, tenant_id):
        res = _toggle(client, tenant_id, 1, "1-1")
        assert res.status_code == 200
        data = res.get_json()
        assert data["phases"][1]["checklist"] == {"1-1": True}
        assert data["phases"][1]["state"] == "in_progress"

    def test_toggle_explicit_done(self, client, tenant_id):
        _toggle(client, tenant_id, 1, "1-1", done=True)
        res = _toggle(client, tenant_id, 1, "1-1", done=True)
        assert res.get_json()["phases"][1]["checklist"] == {"1-1": True}

    def test_toggle_done_must_be_boolean(self, client, tenant_id):
        res = _toggle(client, tenant_id, 1, "1-1", done="yes")
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_INVALID"

    def test_toggle_unknown_item(self, client, tenant_id):
        res = _toggle(client, tenant_id, 1, "3-4")
        assert res.status_code == 422
        assert res.get_json()["code"] == "ERR_VALIDATION_CONSTRAINT"

    def test_toggle_unknown_phase(self, client, tenant_id):
        res = _toggle(client, tenant_id, 8, "8-1")
        assert res.status_code == 422

    def test_notes(self, client, tenant_id):
        res = client.put(f"{BASE}/phases/3/notes", json={"tenant_id": tenant_id, "notes": "Count on Friday"})
        assert res.status_code == 200
        assert res.get_json()["phases"][3]["notes"] == "Count on Friday"

    def test_notes_required(self, client, tenant_id):
        res = client.put(f"{BASE}/phases/3/notes", json={"tenant_id": tenant_id})
        assert res.status_code == 400

    def test_non_json_body_rejected(self, client, tenant_id):
        res = client.put(
            f"{BASE}/phases/3/notes?tenant_id={tenant_id}",
            data="notes=hi", content_type="text/plain",
        )
        assert res.status_code == 415


class TestPhaseLifecycleEndpoints:
    """Complete / uncomplete over HTTP."""

    def test_complete_incomplete_phase(self, client, tenant_id):
        _toggle(client, tenant_id, 2, "2-1")
        res = client.post(f"{BASE}/phases/2/complete", json={"tenant_id": tenant_id})
        assert res.status_code == 422
        body = res.get_json()
        assert body["code"] == "ERR_PHASE_INCOMPLETE"
        assert body["details"]["kind"] == "phase_incomplete"
        assert body["details"]["progress"] == 5

    def test_complete_then_uncomplete(self, client, tenant_id):
        from maintenancehub.services.program_catalog import get_checklist

        for item in get_checklist(1):
            _toggle(client, tenant_id, 1, item.id, done=True)

        res = client.post(f"{BASE}/phases/1/complete", json={"tenant_id": tenant_id})
        assert res.status_code == 200
        data = res.get_json()
        assert data["phases"][1]["completed"] is True
        assert data["current_phase"] == 2

        res = client.post(f"{BASE}/phases/1/uncomplete", json={"tenant_id": tenant_id})
        assert res.status_code == 200
        record = res.get_json()["phases"][1]
        assert record["completed"] is False
        assert record["progress"] == 100
        assert record["state"] == "ready_to_complete"

    def test_uncomplete_open_phase(self, client, tenant_id):
        res = client.post(f"{BASE}/phases/4/uncomplete", json={"tenant_id": tenant_id})
        assert res.status_code == 409
        body = res.get_json()
        assert body["code"] == "ERR_CONFLICT_STATE"
        assert body["details"]["current_state"] == "not_started"

    def test_stale_version(self, client, tenant_id):
        version = client.get(f"{BASE}/progress?tenant_id={tenant_id}").get_json()["version"]
        assert _toggle(client, tenant_id, 1, "1-1", expected_version=version).status_code == 200

        res = _toggle(client, tenant_id, 1, "1-2", expected_version=version)
        assert res.status_code == 409
        body = res.get_json()
        assert body["code"] == "ERR_CONFLICT_VERSION"
        assert body["details"]["current_version"] == version + 1

    def test_expected_version_must_be_integer(self, client, tenant_id):
        res = _toggle(client, tenant_id, 1, "1-1", expected_version="latest")
        assert res.status_code == 400


class TestAssessmentEndpoints:
    """Assessment save/read and per-phase actions."""

    ITEMS = [
        {"id": "1.4.2", "activity_code": "1.4", "description": "PM strategy",
         "possible_score": 8, "actual_score": 0, "category": "PM Strategy"},
        {"id": "1.1.1", "activity_code": "1.1", "description": "Records",
         "possible_score": 2, "actual_score": 2, "category": "Equipment Records"},
    ]

    def test_save_and_read(self, client, tenant_id):
        res = client.post(f"{BASE}/assessment", json={
            "tenant_id": tenant_id, "plant_name": "Plant 7", "items": self.ITEMS,
        })
        assert res.status_code == 200
        payload = res.get_json()["payload"]
        assert payload["total_score"] == 2
        assert payload["max_score"] == 10
        assert payload["percentage_score"] == 20
        assert len(payload["improvement_actions"]) == 1

        res = client.get(f"{BASE}/assessment?tenant_id={tenant_id}")
        assert res.status_code == 200
        assert res.get_json()["assessment"]["payload"]["plant_name"] == "Plant 7"

    def test_read_before_save(self, client, tenant_id):
        res = client.get(f"{BASE}/assessment?tenant_id={tenant_id}")
        assert res.status_code == 200
        assert res.get_json()["assessment"] is None

    def test_items_required(self, client, tenant_id):
        res = client.post(f"{BASE}/assessment", json={"tenant_id": tenant_id})
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_REQUIRED"

    def test_items_must_be_list(self, client, tenant_id):
        res = client.post(f"{BASE}/assessment", json={"tenant_id": tenant_id, "items": {"a": 1}})
        assert res.status_code == 400

    def test_non_numeric_score(self, client, tenant_id):
        items = [{"id": "x", "possible_score": "eight"}]
        res = client.post(f"{BASE}/assessment", json={"tenant_id": tenant_id, "items": items})
        assert res.status_code == 422

    def test_non_numeric_element_number(self, client, tenant_id):
        items = [{"id": "x", "possible_score": 2, "element_number": "x"}]
        res = client.post(f"{BASE}/assessment", json={"tenant_id": tenant_id, "items": items})
        assert res.status_code == 422
        assert res.get_json()["details"]["field"] == "element_number"

    def test_phase_actions(self, client, tenant_id):
        client.post(f"{BASE}/assessment", json={"tenant_id": tenant_id, "items": self.ITEMS})
        res = client.get(f"{BASE}/phases/4/actions?tenant_id={tenant_id}")
        assert res.status_code == 200
        data = res.get_json()
        assert [a["id"] for a in data["actions"]] == ["action-1.4.2"]
        assert data["actions"][0]["priority"] == "critical"

        assert client.get(f"{BASE}/phases/1/actions?tenant_id={tenant_id}").get_json()["actions"] == []

    def test_deliverables(self, client, tenant_id):
        client.post(f"{BASE}/assessment", json={"tenant_id": tenant_id, "items": self.ITEMS})
        res = client.get(f"{BASE}/deliverables?tenant_id={tenant_id}&phase=0")
        assert res.status_code == 200
        assert res.get_json()["total"] == 1

        res = client.get(f"{BASE}/deliverables?tenant_id={tenant_id}&phase=zero")
        assert res.status_code == 400


class TestDeliverableEndpoints:
    """Form deliverables per checklist item."""

    BODY = {
        "phase": 3,
        "checklist_item_id": "3-8",
        "deliverable_type": "parts_abc_analysis",
        "payload": {"parts": [{"sku": "BRG-6205", "class": "A"}]},
    }

    def _create(self, client, tenant_id, **changes):
        return client.post(f"{BASE}/deliverables", json={"tenant_id": tenant_id, **self.BODY, **changes})

    def test_create_update_delete(self, client, tenant_id):
        res = self._create(client, tenant_id)
        assert res.status_code == 201
        deliverable = res.get_json()
        assert deliverable["payload"]["parts"][0]["class"] == "A"

        res = client.put(f"{BASE}/deliverables/{deliverable['id']}", json={
            "tenant_id": tenant_id, "is_complete": True, "title": "ABC analysis",
        })
        assert res.status_code == 200
        assert res.get_json()["is_complete"] is True
        assert res.get_json()["title"] == "ABC analysis"

        listed = client.get(f"{BASE}/deliverables?tenant_id={tenant_id}&phase=3").get_json()
        assert listed["total"] == 1

        res = client.delete(f"{BASE}/deliverables/{deliverable['id']}?tenant_id={tenant_id}")
        assert res.status_code == 204
        res = client.put(f"{BASE}/deliverables/{deliverable['id']}", json={"tenant_id": tenant_id, "title": "x"})
        assert res.status_code == 404

    def test_duplicate_key(self, client, tenant_id):
        self._create(client, tenant_id)
        res = self._create(client, tenant_id)
        assert res.status_code == 409
        assert res.get_json()["code"] == "ERR_CONFLICT_DUPLICATE"

    def test_phase_required(self, client, tenant_id):
        res = client.post(f"{BASE}/deliverables", json={"tenant_id": tenant_id, "checklist_item_id": "3-8"})
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_REQUIRED"

    def test_phase_must_be_integer(self, client, tenant_id):
        res = self._create(client, tenant_id, phase="3")
        assert res.status_code == 400

    def test_checklist_item_required(self, client, tenant_id):
        res = self._create(client, tenant_id, checklist_item_id="")
        assert res.status_code == 400

    def test_phase_out_of_range(self, client, tenant_id):
        res = self._create(client, tenant_id, phase=9)
        assert res.status_code == 422
        assert res.get_json()["code"] == "ERR_VALIDATION_CONSTRAINT"

    def test_other_tenant_delete_is_404(self, client, tenant_id):
        deliverable = self._create(client, tenant_id).get_json()
        res = client.delete(f"{BASE}/deliverables/{deliverable['id']}?tenant_id={tenant_id + 1}")
        assert res.status_code == 404


class TestClientCompanyEndpoints:
    """Client engagements."""

    def test_update(self, client, tenant_id, client_company):
        res = client.put(f"{BASE}/client-companies/{client_company['id']}", json={
            "tenant_id": tenant_id, "location": "Mobile, AL", "contact_email": "ops@acme.example",
        })
        assert res.status_code == 200
        data = res.get_json()
        assert data["location"] == "Mobile, AL"
        assert data["contact_email"] == "ops@acme.example"
        assert data["name"] == client_company["name"]

    def test_update_rename_conflict(self, client, tenant_id, client_company):
        other = client.post(f"{BASE}/client-companies", json={"tenant_id": tenant_id, "name": "Delta Foods"}).get_json()
        res = client.put(f"{BASE}/client-companies/{other['id']}", json={
            "tenant_id": tenant_id, "name": client_company["name"],
        })
        assert res.status_code == 409

    def test_update_other_tenants_client(self, client, tenant_id, client_company):
        res = client.put(f"{BASE}/client-companies/{client_company['id']}", json={
            "tenant_id": tenant_id + 1, "notes": "x",
        })
        assert res.status_code == 404

    def test_create_list_delete(self, client, tenant_id):
        res = client.post(f"{BASE}/client-companies", json={
            "tenant_id": tenant_id, "name": "Delta Foods", "industry": "Food & Beverage",
        })
        assert res.status_code == 201
        company = res.get_json()
        assert company["industry"] == "Food & Beverage"

        res = client.get(f"{BASE}/client-companies?tenant_id={tenant_id}")
        assert res.get_json()["total"] == 1

        res = client.delete(f"{BASE}/client-companies/{company['id']}?tenant_id={tenant_id}")
        assert res.status_code == 204
        assert client.get(f"{BASE}/client-companies?tenant_id={tenant_id}").get_json()["total"] == 0

    def test_duplicate_name(self, client, tenant_id, client_company):
        res = client.post(f"{BASE}/client-companies", json={"tenant_id": tenant_id, "name": client_company["name"]})
        assert res.status_code == 409
        assert res.get_json()["code"] == "ERR_CONFLICT_DUPLICATE"

    def test_name_required(self, client, tenant_id):
        res = client.post(f"{BASE}/client-companies", json={"tenant_id": tenant_id})
        assert res.status_code == 400

    def test_progress_scoped_by_client(self, client, tenant_id, client_company):
        cid = client_company["id"]
        _toggle(client, tenant_id, 1, "1-1", client_company_id=cid)

        scoped = client.get(f"{BASE}/progress?tenant_id={tenant_id}&client_company_id={cid}").get_json()
        own = client.get(f"{BASE}/progress?tenant_id={tenant_id}").get_json()
        assert scoped["phases"][1]["checklist"] == {"1-1": True}
        assert own["phases"][1]["checklist"] == {}

    def test_unknown_client_is_404(self, client, tenant_id):
        res = client.get(f"{BASE}/progress?tenant_id={tenant_id}&client_company_id=missing")
        assert res.status_code == 404
        assert res.get_json()["code"] == "ERR_NOT_FOUND"

    def test_delete_other_tenants_client(self, client, tenant_id, client_company):
        res = client.delete(f"{BASE}/client-companies/{client_company['id']}?tenant_id={tenant_id + 1}")
        assert res.status_code == 404


class TestAppShell:
    """Health and generic error handlers."""

    def test_health(self, client):
        res = client.get("/api/v1/health")
        assert res.status_code == 200
        assert res.get_json()["status"] == "ok"

    def test_health_live(self, client):
        res = client.get("/api/v1/health/live")
        assert res.status_code == 200
        assert res.get_json()["checks"]["database"]["status"] == "ok"

    def test_request_headers(self, client, tenant_id):
        res = client.get(f"{BASE}/progress?tenant_id={tenant_id}")
        assert "X-Request-ID" in res.headers
        assert "X-Request-Duration-Ms" in res.headers

    def test_unknown_route(self, client):
        res = client.get("/api/v1/nothing-here")
        assert res.status_code == 404

    @pytest.mark.parametrize("method", ["put", "delete"])
    def test_method_not_allowed(self, client, method):
        res = getattr(client, method)(f"{BASE}/catalog")
        assert res.status_code == 405
