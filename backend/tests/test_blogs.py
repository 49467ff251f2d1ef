import pytest

from tests.helpers import auth

CONTENT = "Position sizing decides whether a losing streak ends your trading career. " * 2


@pytest.fixture
def blog(client, instructor):
    res = client.post("/api/blogs", headers=auth(instructor), json={
        "title": "Risk Management",
        "content": CONTENT,
        "tags": "risk",
        "published": True,
    })
    assert res.status_code == 201, res.text
    return res.json()


def test_create_blog(blog, instructor):
    assert blog["authorId"] == instructor.id
    assert blog["tags"] == ["risk"]
    assert blog["published"] is True


def test_create_blog_requires_token(client):
    res = client.post("/api/blogs", json={"title": "Nope", "content": CONTENT})
    assert res.status_code == 401


def test_blog_validation(client, student):
    res = client.post("/api/blogs", headers=auth(student), json={"title": "Hi", "content": "short"})
    assert res.status_code == 400
    msgs = {e["field"]: e["msg"] for e in res.json()["errors"]}
    assert msgs["title"] == "Title must be between 3 and 100 characters"
    assert msgs["content"] == "Content must be at least 50 characters"


def test_public_listing(client, blog, student):
    client.post("/api/blogs", headers=auth(student), json={"title": "Draft post", "content": CONTENT})

    res = client.get("/api/blogs")
    assert [b["_id"] for b in res.json()] == [blog["_id"]]
    assert res.json()[0]["author"]["name"]

    assert len(client.get("/api/blogs", params={"published": "false"}).json()) == 1
    assert len(client.get("/api/blogs", params={"tag": "risk"}).json()) == 1
    assert client.get("/api/blogs", params={"tag": "crypto"}).json() == []
    assert len(client.get("/api/blogs", params={"search": "management"}).json()) == 1


def test_get_blog(client, blog):
    assert client.get(f"/api/blogs/{blog['_id']}").json()["title"] == "Risk Management"
    assert client.get("/api/blogs/" + "0" * 32).status_code == 404


def test_only_author_or_admin_edits(client, blog, student, admin):
    update = {"title": "Risk Management 2", "content": CONTENT, "tags": ["risk", "sizing"]}

    assert client.put(f"/api/blogs/{blog['_id']}", headers=auth(student), json=update).status_code == 403

    res = client.put(f"/api/blogs/{blog['_id']}", headers=auth(admin), json=update)
    assert res.status_code == 200
    assert res.json()["tags"] == ["risk", "sizing"]

    assert client.delete(f"/api/blogs/{blog['_id']}", headers=auth(student)).status_code == 403
    assert client.delete(f"/api/blogs/{blog['_id']}", headers=auth(admin)).status_code == 200
    assert client.get(f"/api/blogs/{blog['_id']}").status_code == 404


def test_like_toggles(client, blog, student):
    res = client.post(f"/api/blogs/{blog['_id']}/like", headers=auth(student))
    assert res.json()["likes"] == [student.id]

    res = client.post(f"/api/blogs/{blog['_id']}/like", headers=auth(student))
    assert res.json()["likes"] == []


def test_comment(client, blog, student):
    res = client.post(f"/api/blogs/{blog['_id']}/comments", headers=auth(student), json={"content": "Great read"})
    assert res.status_code == 200
    comment = res.json()["comments"][0]
    assert comment["content"] == "Great read"
    assert comment["user"]["_id"] == student.id

    res = client.post(f"/api/blogs/{blog['_id']}/comments", headers=auth(student), json={"content": "  "})
    assert res.status_code == 400
