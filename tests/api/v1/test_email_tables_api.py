"""Tests for the email table codec/command and email-edit endpoints."""

SAMPLE = (
    "| Section | Content |\n"
    "|---------|---------|\n"
    "| **HEADER** | Big Sale |\n"
    "| **BODY** | Shop now and save |"
)


class TestCodecEndpoints:

    def test_parse(self, client):
        response = client.post("/api/v1/email-tables/parse", json={"content": SAMPLE})
        assert response.status_code == 200
        data = response.json()
        assert data["is_empty"] is False
        assert [(r["section"], r["content"]) for r in data["rows"]] == [
            ("**HEADER**", "Big Sale"),
            ("**BODY**", "Shop now and save"),
        ]
        assert all(r["id"] for r in data["rows"])

    def test_parse_unrecognized_content(self, client):
        response = client.post("/api/v1/email-tables/parse", json={"content": "Dear customer"})
        assert response.json() == {"rows": [], "is_empty": True}

    def test_serialize(self, client):
        response = client.post("/api/v1/email-tables/serialize", json={"rows": [
            {"section": "**HEADER**", "content": "Big Sale"},
            {"section": "**BODY**", "content": "Shop now and save"},
        ]})
        assert response.status_code == 200
        assert response.json()["content"] == SAMPLE

    def test_serialize_no_rows(self, client):
        response = client.post("/api/v1/email-tables/serialize", json={"rows": []})
        assert response.json()["content"] == ""

    def test_html_round_trip(self, client):
        html = client.post("/api/v1/email-tables/to-html", json={"content": SAMPLE}).json()["html"]
        assert "<strong>HEADER</strong>" in html

        response = client.post("/api/v1/email-tables/from-html", json={"html": html})
        assert response.json()["content"] == SAMPLE

    def test_from_html_without_table_passes_through(self, client):
        response = client.post("/api/v1/email-tables/from-html", json={"html": "<p>hi</p>"})
        assert response.json()["content"] == "<p>hi</p>"


class TestCommandEndpoints:

    def test_section_operations(self, client):
        response = client.post("/api/v1/email-tables/section-operations", json={
            "content": SAMPLE,
            "operations": [
                {"action": "move_section", "section_name": "BODY", "position": "start"},
                {"action": "update_section_content", "section_name": "HEADER", "section_content": "Mega Sale"},
            ],
        })
        assert response.status_code == 200
        assert response.json()["content"].splitlines()[2:] == [
            "| **BODY** | Shop now and save |",
            "| **HEADER** | Mega Sale |",
        ]

    def test_unknown_section_is_404(self, client):
        response = client.post("/api/v1/email-tables/section-operations", json={
            "content": SAMPLE,
            "operations": [{"action": "remove_section", "section_name": "FOOTER"}],
        })
        assert response.status_code == 404
        assert response.json()["detail"]["error_code"] == "SECTION_NOT_FOUND"

    def test_missing_section_content_is_400(self, client):
        response = client.post("/api/v1/email-tables/section-operations", json={
            "content": SAMPLE,
            "operations": [{"action": "add_section", "section_name": "PS"}],
        })
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "VALIDATION_ERROR"

    def test_patch(self, client):
        response = client.post("/api/v1/email-tables/patches", json={
            "content": SAMPLE,
            "target_text": "Big",
            "operations": [{"type": "delete", "length": 3}, {"type": "insert", "value": "Mega"}],
        })
        assert response.status_code == 200
        assert "| **HEADER** | Mega Sale |" in response.json()["content"]

    def test_patch_with_missing_anchor_is_409(self, client):
        response = client.post("/api/v1/email-tables/patches", json={
            "content": SAMPLE,
            "target_text": "nowhere",
            "operations": [{"type": "insert", "value": "x"}],
        })
        assert response.status_code == 409
        assert response.json()["detail"]["error_code"] == "PATCH_REJECTED"

    def test_request_validation_error_shape(self, client):
        response = client.post("/api/v1/email-tables/patches", json={"content": SAMPLE, "operations": []})
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error_code"] == "VALIDATION_ERROR"
        assert detail["details"]["errors"][0]["field"].endswith("operations")


class TestEmailEditEndpoints:

    def test_tool_definition(self, client):
        data = client.get("/api/v1/email-edit/tool").json()
        assert data["name"] == "email_edit"

    def test_full_replacement_accepted(self, client):
        html = "<table><tbody><tr><td>A</td><td>B</td></tr></tbody></table>"
        response = client.post("/api/v1/email-edit", json={"updatedHtml": html, "explanation": "Rewrote"})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["type"] == "full_replacement"
        assert data["html"] == html

    def test_full_replacement_rejected_in_body(self, client):
        response = client.post("/api/v1/email-edit", json={"updatedHtml": "<p>no table</p>"})
        assert response.status_code == 200
        assert response.json()["success"] is False
        assert "error" in response.json()

    def test_action_validation_failure_in_body(self, client):
        response = client.post("/api/v1/email-edit/actions", json={"action": "insert", "target": "x"})
        assert response.status_code == 200
        assert response.json()["success"] is False
