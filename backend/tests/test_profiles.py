PROFILE = {
    "profileName": "Backend roles",
    "email": "ada@example.com",
    "fullName": "Ada Lovelace",
    "skills": ["Python", "FastAPI"],
    "links": [{"type": "GitHub", "url": "https://github.com/ada"}],
    "experiences": [
        {"jobTitle": "Engineer", "companyName": "Analytical Co", "startDate": "2021-01",
         "currentlyWorking": True, "team": "Engines"},
    ],
}


def create(client, body=None):
    r = client.post("/profiles", json=body or PROFILE)
    assert r.status_code == 201
    return r.json()


def test_create_and_get_profile(client):
    created = create(client)
    assert created["id"]
    assert created["profileName"] == "Backend roles"
    assert created["skills"] == ["Python", "FastAPI"]
    # unknown entry keys are kept
    assert created["experiences"][0]["team"] == "Engines"
    assert created["experiences"][0]["currentlyWorking"] is True

    r = client.get(f"/profiles/{created['id']}")
    assert r.status_code == 200
    assert r.json()["fullName"] == "Ada Lovelace"


def test_create_requires_name_and_email(client):
    r = client.post("/profiles", json={"fullName": "No Name"})
    assert r.status_code == 422


def test_create_rejects_entry_without_required_fields(client):
    body = dict(PROFILE, experiences=[{"companyName": "X", "startDate": "2020-01"}])
    r = client.post("/profiles", json=body)
    assert r.status_code == 422


def test_list_profiles(client):
    create(client)
    create(client, dict(PROFILE, profileName="Data roles"))
    r = client.get("/profiles")
    assert r.status_code == 200
    assert sorted(p["profileName"] for p in r.json()) == ["Backend roles", "Data roles"]


def test_update_profile_is_partial(client):
    created = create(client)
    r = client.patch(f"/profiles/{created['id']}", json={"title": "Staff Engineer", "skills": ["Go"]})
    assert r.status_code == 200
    data = r.json()
    assert data["title"] == "Staff Engineer"
    assert data["skills"] == ["Go"]
    assert data["fullName"] == "Ada Lovelace"
    assert data["links"] == PROFILE["links"]


def test_update_cannot_clear_required_fields(client):
    created = create(client)
    r = client.patch(f"/profiles/{created['id']}", json={"email": None, "summary": None})
    assert r.status_code == 200
    assert r.json()["email"] == "ada@example.com"


def test_delete_profile(client):
    created = create(client)
    r = client.delete(f"/profiles/{created['id']}")
    assert r.status_code == 200
    assert r.json()["id"] == created["id"]
    assert client.get(f"/profiles/{created['id']}").status_code == 404


def test_missing_profile_is_404(client):
    r = client.get("/profiles/does-not-exist")
    assert r.status_code == 404
    assert r.json()["error"] == "NotFound"
