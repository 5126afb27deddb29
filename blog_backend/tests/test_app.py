import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from blog_backend.app import create_app
from blog_backend.auth import ensure_admin_user
from blog_backend.config import Settings
from blog_backend.db import NewCategory, NewTag
from blog_backend.dependencies import get_db_client
from blog_backend.memory_db import InMemoryDbClient

PASSWORD = "correct horse battery"


class BlogApiTestCase(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.app = create_app()
        self.app.dependency_overrides[get_db_client] = lambda: self.db
        self.client = TestClient(self.app)

        settings_patch = patch(
            "blog_backend.auth.get_settings",
            return_value=Settings(admin_usernames=["admin"]),
        )
        settings_patch.start()
        self.addCleanup(settings_patch.stop)

    def register(self, username="alice", client=None):
        client = client or self.client
        response = client.post(
            "/api/auth/register",
            json={
                "username": username,
                "email": f"{username}@example.com",
                "password": PASSWORD,
                "display_name": username.title(),
            },
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def login(self, username="alice", client=None):
        client = client or self.client
        response = client.post(
            "/api/auth/login", json={"username": username, "password": PASSWORD}
        )
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["user"]

    def sign_in(self, username="alice", client=None):
        self.register(username, client)
        return self.login(username, client)

    def second_client(self):
        return TestClient(self.app)

    def create_post(self, title="Hello World", **extra):
        response = self.client.post(
            "/api/posts", json={"title": title, "content": "Some body text", **extra}
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()


class AuthApiTests(BlogApiTestCase):
    def test_register_login_me_logout(self):
        user = self.register()
        self.assertEqual(user["username"], "alice")
        self.assertEqual(user["role"], "user")
        self.assertNotIn("password_hash", user)
        self.assertNotIn("password", user)

        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)
        self.login()
        me = self.client.get("/api/auth/me")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["id"], user["id"])

        logout = self.client.post("/api/auth/logout")
        self.assertEqual(logout.json()["message"], "Logged out successfully")
        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)

    def test_password_is_stored_hashed(self):
        self.register()
        stored = self.db.get_user_by_username("alice")
        self.assertNotEqual(stored.password_hash, PASSWORD)
        self.assertTrue(stored.password_hash.startswith("$argon2"))

    def test_duplicate_registration_is_rejected(self):
        self.register()
        response = self.client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "x@example.com", "password": PASSWORD},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Username already taken")

        response = self.client.post(
            "/api/auth/register",
            json={"username": "bob", "email": "alice@example.com", "password": PASSWORD},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Email already registered")

    def test_wrong_password_is_rejected(self):
        self.register()
        response = self.client.post(
            "/api/auth/login", json={"username": "alice", "password": "not the password"}
        )
        self.assertEqual(response.status_code, 401)
        response = self.client.post(
            "/api/auth/login", json={"username": "nobody", "password": PASSWORD}
        )
        self.assertEqual(response.status_code, 401)

    def test_configured_admin_username_gets_admin_role(self):
        with self.assertLogs("blog_backend.auth", level="WARNING") as logs:
            self.assertEqual(self.register("admin")["role"], "admin")
        self.assertIn("admin_usernames", logs.output[0])

        response = self.client.post(
            "/api/auth/register",
            json={"username": "admin", "email": "late@example.com", "password": PASSWORD},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.db.get_user_by_username("admin").email, "admin@example.com")

    def test_ensure_admin_user_creates_then_promotes(self):
        created = ensure_admin_user(self.db, "root", "root@example.com", PASSWORD)
        self.assertTrue(created.is_admin)
        self.assertEqual(ensure_admin_user(self.db, "root", "x@example.com", "other").id, created.id)
        self.login("root")

        self.register("bob")
        promoted = ensure_admin_user(self.db, "bob", "ignored@example.com", "ignored password")
        self.assertTrue(promoted.is_admin)
        self.assertEqual(promoted.email, "bob@example.com")
        self.login("bob")

    def test_update_profile(self):
        self.sign_in()
        response = self.client.patch(
            "/api/auth/me", json={"bio": "Writes about CSS", "password": "a brand new secret"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["bio"], "Writes about CSS")

        self.client.post("/api/auth/logout")
        relogin = self.client.post(
            "/api/auth/login", json={"username": "alice", "password": "a brand new secret"}
        )
        self.assertEqual(relogin.status_code, 200)

    def test_session_for_deleted_user_is_dropped(self):
        user = self.sign_in()
        self.db.delete_user(user["id"])
        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)


class PostApiTests(BlogApiTestCase):
    def test_health(self):
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_create_post_requires_login(self):
        response = self.client.post("/api/posts", json={"title": "Hi", "content": "Body"})
        self.assertEqual(response.status_code, 401)

    def test_create_post_derives_slug_and_author(self):
        user = self.sign_in()
        post = self.create_post("Getting Started with React!")
        self.assertEqual(post["slug"], "getting-started-with-react")
        self.assertEqual(post["author"], "Alice")
        self.assertEqual(post["user_id"], user["id"])

        detail = self.client.get("/api/posts/getting-started-with-react")
        self.assertEqual(detail.status_code, 200)
        body = detail.json()
        self.assertEqual(body["post"]["id"], post["id"])
        self.assertEqual(body["tags"], [])
        self.assertEqual(body["comments"], [])

    def test_unknown_post_slug_is_404(self):
        response = self.client.get("/api/posts/missing")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Post not found")

    def test_duplicate_slug_maps_to_conflict(self):
        self.sign_in()
        self.create_post("Same Title")
        response = self.client.post(
            "/api/posts", json={"title": "Same Title", "content": "Again"}
        )
        self.assertEqual(response.status_code, 409)

    def test_unknown_category_maps_to_bad_request(self):
        self.sign_in()
        response = self.client.post(
            "/api/posts", json={"title": "Hi", "content": "Body", "category_id": 404}
        )
        self.assertEqual(response.status_code, 400)

    def test_untitled_slug_is_rejected(self):
        self.sign_in()
        response = self.client.post("/api/posts", json={"title": "!!!", "content": "Body"})
        self.assertEqual(response.status_code, 400)

    def test_create_post_with_tags(self):
        self.sign_in()
        css = self.db.create_tag(NewTag(name="CSS", slug="css"))
        post = self.create_post("Grid", tags=[css.id])
        tags = self.client.get(f"/api/posts/{post['id']}/tags").json()
        self.assertEqual([tag["slug"] for tag in tags], ["css"])

        response = self.client.post(
            "/api/posts", json={"title": "Other", "content": "Body", "tags": [999]}
        )
        self.assertEqual(response.status_code, 400)
        self.assertIsNone(self.db.get_post_by_slug("other"))

    def test_published_filter(self):
        self.sign_in()
        self.create_post("Live")
        self.create_post("Draft", published=False)
        drafts = self.client.get("/api/posts", params={"published": "false"}).json()
        self.assertEqual([p["slug"] for p in drafts], ["draft"])
        self.assertEqual(len(self.client.get("/api/posts").json()), 2)

    def test_owner_can_update_and_delete(self):
        self.sign_in()
        post = self.create_post()
        response = self.client.patch(
            f"/api/posts/{post['id']}", json={"title": "Renamed", "published": False}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["title"], "Renamed")
        self.assertEqual(response.json()["slug"], "hello-world")

        put = self.client.put(f"/api/posts/{post['id']}", json={"excerpt": "Short"})
        self.assertEqual(put.json()["excerpt"], "Short")

        self.assertEqual(self.client.delete(f"/api/posts/{post['id']}").status_code, 204)
        self.assertEqual(self.client.get("/api/posts/hello-world").status_code, 404)

    def test_update_rejects_explicit_null_for_required_field(self):
        self.sign_in()
        post = self.create_post()
        response = self.client.patch(f"/api/posts/{post['id']}", json={"title": None})
        self.assertEqual(response.status_code, 422)

    def test_update_replaces_tags(self):
        self.sign_in()
        a = self.db.create_tag(NewTag(name="A", slug="a"))
        b = self.db.create_tag(NewTag(name="B", slug="b"))
        post = self.create_post(tags=[a.id])
        self.client.patch(f"/api/posts/{post['id']}", json={"tags": [b.id]})
        self.assertEqual([t.id for t in self.db.get_tags_by_post_id(post["id"])], [b.id])

    def test_other_user_cannot_modify_post(self):
        self.sign_in()
        post = self.create_post()

        other = self.second_client()
        self.sign_in("mallory", other)
        self.assertEqual(
            other.patch(f"/api/posts/{post['id']}", json={"title": "Mine"}).status_code, 403
        )
        self.assertEqual(other.delete(f"/api/posts/{post['id']}").status_code, 403)

        admin = self.second_client()
        self.sign_in("admin", admin)
        self.assertEqual(admin.delete(f"/api/posts/{post['id']}").status_code, 204)

    def test_missing_post_update_is_404(self):
        self.sign_in()
        response = self.client.patch("/api/posts/999", json={"title": "x"})
        self.assertEqual(response.status_code, 404)

    def test_search(self):
        self.sign_in()
        self.create_post("React Hooks")
        self.create_post("Docker Basics")

        results = self.client.get("/api/search", params={"q": "REACT"}).json()
        self.assertEqual([p["slug"] for p in results], ["react-hooks"])

        self.assertEqual(self.client.get("/api/search").status_code, 400)
        self.assertEqual(self.client.get("/api/search", params={"q": "  "}).status_code, 400)

    def test_search_keeps_surrounding_whitespace(self):
        self.sign_in()
        self.create_post("React Hooks")
        self.create_post("Try React")

        results = self.client.get("/api/search", params={"q": " react"}).json()
        self.assertEqual([p["slug"] for p in results], ["try-react"])


class PostTagApiTests(BlogApiTestCase):
    def test_attach_list_and_detach(self):
        self.sign_in()
        post = self.create_post()
        tag = self.db.create_tag(NewTag(name="Python", slug="python"))

        first = self.client.post(f"/api/posts/{post['id']}/tags", json={"tag_id": tag.id})
        again = self.client.post(f"/api/posts/{post['id']}/tags", json={"tag_id": tag.id})
        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.json()["id"], again.json()["id"])

        tagged = self.client.get("/api/tags/python").json()
        self.assertEqual([p["id"] for p in tagged["posts"]], [post["id"]])

        url = f"/api/posts/{post['id']}/tags/{tag.id}"
        self.assertEqual(self.client.delete(url).status_code, 204)
        missing = self.client.delete(url)
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["detail"], "Tag is not attached to this post")

    def test_attach_unknown_tag_is_bad_request(self):
        self.sign_in()
        post = self.create_post()
        response = self.client.post(f"/api/posts/{post['id']}/tags", json={"tag_id": 42})
        self.assertEqual(response.status_code, 400)


class TaxonomyApiTests(BlogApiTestCase):
    def test_create_and_fetch_category(self):
        self.sign_in()
        response = self.client.post(
            "/api/categories", json={"name": "Web Development", "description": "Web"}
        )
        self.assertEqual(response.status_code, 201)
        category = response.json()
        self.assertEqual(category["slug"], "web-development")

        self.create_post(category_id=category["id"])
        detail = self.client.get("/api/categories/web-development").json()
        self.assertEqual(detail["category"]["name"], "Web Development")
        self.assertEqual(len(detail["posts"]), 1)
        self.assertEqual(len(self.client.get("/api/categories").json()), 1)

    def test_duplicate_category_is_conflict(self):
        self.sign_in()
        self.client.post("/api/categories", json={"name": "Design"})
        response = self.client.post("/api/categories", json={"name": "Design"})
        self.assertEqual(response.status_code, 409)

    def test_category_changes_need_admin(self):
        category = self.db.create_category(NewCategory(name="Design", slug="design"))
        self.sign_in()
        url = f"/api/categories/{category.id}"
        self.assertEqual(self.client.patch(url, json={"name": "Art"}).status_code, 403)

        admin = self.second_client()
        self.sign_in("admin", admin)
        self.assertEqual(admin.patch(url, json={"name": "Art"}).json()["name"], "Art")
        self.assertEqual(admin.delete(url).status_code, 204)
        self.assertEqual(admin.delete(url).status_code, 404)

    def test_tag_routes(self):
        self.sign_in()
        created = self.client.post("/api/tags", json={"name": "Node.js"})
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["slug"], "node-js")
        self.assertEqual(self.client.get("/api/tags/missing").status_code, 404)

        admin = self.second_client()
        self.sign_in("admin", admin)
        tag_id = created.json()["id"]
        self.assertEqual(
            admin.patch(f"/api/tags/{tag_id}", json={"slug": "nodejs"}).json()["slug"], "nodejs"
        )
        self.assertEqual(admin.delete(f"/api/tags/{tag_id}").status_code, 204)
        self.assertEqual(self.client.get("/api/tags").json(), [])


class CommentApiTests(BlogApiTestCase):
    def setUp(self):
        super().setUp()
        self.sign_in()
        self.post = self.create_post()
        self.anon = self.second_client()

    def comment(self, client=None, **body):
        client = client or self.anon
        return client.post(f"/api/posts/{self.post['id']}/comments", json=body)

    def test_anonymous_comment_needs_name_and_email(self):
        response = self.comment(content="Hi")
        self.assertEqual(response.status_code, 400)

        response = self.comment(content="Hi", author_name="Jane", author_email="jane@example.com")
        self.assertEqual(response.status_code, 201)
        self.assertIsNone(response.json()["user_id"])

    def test_signed_in_comment_defaults_author(self):
        response = self.comment(client=self.client, content="My own post")
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["author_name"], "Alice")
        self.assertEqual(body["author_email"], "alice@example.com")

    def test_threaded_listing(self):
        root = self.comment(content="Root", author_name="A", author_email="a@example.com").json()
        reply = self.comment(
            content="Reply", author_name="B", author_email="b@example.com", parent_id=root["id"]
        ).json()
        self.comment(content="Second", author_name="C", author_email="c@example.com")

        flat = self.client.get(f"/api/posts/{self.post['id']}/comments").json()
        self.assertEqual(len(flat), 3)

        thread = self.client.get(f"/api/posts/{self.post['id']}/comments/thread").json()
        self.assertEqual([node["content"] for node in thread], ["Root", "Second"])
        self.assertEqual(thread[0]["replies"][0]["id"], reply["id"])

    def test_reply_to_comment_on_other_post_is_rejected(self):
        other = self.create_post("Other Post")
        foreign = self.client.post(
            f"/api/posts/{other['id']}/comments", json={"content": "elsewhere"}
        ).json()
        response = self.comment(
            content="Hi", author_name="A", author_email="a@example.com", parent_id=foreign["id"]
        )
        self.assertEqual(response.status_code, 400)

    def test_comments_on_missing_post_are_404(self):
        self.assertEqual(self.client.get("/api/posts/999/comments").status_code, 404)
        response = self.client.post("/api/posts/999/comments", json={"content": "Hi"})
        self.assertEqual(response.status_code, 404)

    def test_owner_edits_and_deletes_comment(self):
        created = self.comment(client=self.client, content="Typo").json()
        url = f"/api/comments/{created['id']}"

        self.assertEqual(self.anon.patch(url, json={"content": "Hacked"}).status_code, 401)
        edited = self.client.patch(url, json={"content": "Fixed"})
        self.assertEqual(edited.json()["content"], "Fixed")
        self.assertEqual(self.client.delete(url).status_code, 204)
        self.assertEqual(self.client.delete(url).status_code, 404)

    def test_anonymous_comment_is_admin_only_to_moderate(self):
        created = self.comment(
            content="Spam", author_name="S", author_email="s@example.com"
        ).json()
        url = f"/api/comments/{created['id']}"
        self.assertEqual(self.client.delete(url).status_code, 403)

        admin = self.second_client()
        self.sign_in("admin", admin)
        self.assertEqual(admin.delete(url).status_code, 204)

    def test_deleting_post_removes_its_comments(self):
        created = self.comment(client=self.client, content="Bye").json()
        self.client.delete(f"/api/posts/{self.post['id']}")
        self.assertIsNone(self.db.get_comment_by_id(created["id"]))


class MediaApiTests(BlogApiTestCase):
    body = {
        "filename": "cat.png",
        "file_path": "/uploads/cat.png",
        "file_type": "image/png",
        "file_size": 1024,
    }

    def test_media_lifecycle(self):
        self.assertEqual(self.client.post("/api/media", json=self.body).status_code, 401)

        user = self.sign_in()
        created = self.client.post("/api/media", json=self.body)
        self.assertEqual(created.status_code, 201)
        item = created.json()
        self.assertEqual(item["user_id"], user["id"])

        self.assertEqual(self.client.get(f"/api/media/{item['id']}").json()["filename"], "cat.png")
        self.assertEqual(len(self.client.get("/api/media").json()), 1)

        other = self.second_client()
        self.sign_in("mallory", other)
        self.assertEqual(other.delete(f"/api/media/{item['id']}").status_code, 403)

        self.assertEqual(self.client.delete(f"/api/media/{item['id']}").status_code, 204)
        self.assertEqual(self.client.get(f"/api/media/{item['id']}").status_code, 404)

    def test_invalid_media_payload(self):
        self.sign_in()
        response = self.client.post("/api/media", json={**self.body, "file_size": -1})
        self.assertEqual(response.status_code, 422)


if __name__ == "__main__":
    unittest.main()
