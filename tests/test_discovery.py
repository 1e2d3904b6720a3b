from socialfeed.services.base import LookupKind
from socialfeed.services.discovery import DiscoveryService, like_pattern
from socialfeed.services.feed import PostService
from socialfeed.services.social import SocialService
from socialfeed.services.user import UserService


class TestSearch:
    """Username / first name / last name search"""

    async def test_blank_query_returns_nothing(self):
        """Blank queries short-circuit before touching storage"""
        discovery = DiscoveryService(db=None)
        assert await discovery.search_users("") == []
        assert await discovery.search_users("   ") == []
        assert await discovery.search_users(None) == []

    async def test_case_insensitive_over_all_name_fields(self, db, make_user):
        await make_user("alice")
        await make_user("zed", first_name="Alina")
        await make_user("yan", last_name="Malik")
        await make_user("bob", first_name="Robert")

        results = await DiscoveryService(db).search_users("ALI")
        assert {u["username"] for u in results} == {"alice", "zed", "yan"}

    async def test_excludes_viewer_and_reports_follow_state(self, db, make_user):
        alice = await make_user("alice")
        alicia = await make_user("alicia")
        bob = await make_user("bob")
        await SocialService(db).follow(bob.id, alice.id)

        results = await DiscoveryService(db).search_users("ali", viewer_id=alicia.id)
        assert len(results) == 1
        assert results[0]["id"] == alice.id
        assert results[0]["followers_count"] == 1
        assert results[0]["is_following"] is False

        results = await DiscoveryService(db).search_users("alice", viewer_id=bob.id)
        assert results[0]["is_following"] is True

    async def test_wildcards_are_literal(self, db, make_user):
        await make_user("alice")
        await make_user("a_b")

        discovery = DiscoveryService(db)
        assert await discovery.search_users("%") == []
        assert [u["username"] for u in await discovery.search_users("_")] == ["a_b"]

    async def test_limit_is_clamped(self, db, make_user):
        for i in range(27):
            await make_user(f"user{i:02d}")

        discovery = DiscoveryService(db)
        assert len(await discovery.search_users("user")) == 10
        assert len(await discovery.search_users("user", limit=100)) == 25
        assert len(await discovery.search_users("user", limit=0)) == 1

    def test_like_pattern_escapes(self):
        assert like_pattern("50%_a\\b") == "%50\\%\\_a\\\\b%"


class TestSuggestions:
    async def test_excludes_self_and_followed(self, db, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        carol = await make_user("carol")
        dave = await make_user("dave")
        await SocialService(db).follow(alice.id, bob.id)

        suggested = await DiscoveryService(db).get_suggested_users(alice.id, limit=10)
        assert {u.id for u in suggested} == {carol.id, dave.id}

    async def test_default_limit(self, db, make_user):
        viewer = await make_user("viewer")
        for i in range(7):
            await make_user(f"user{i}")

        suggested = await DiscoveryService(db).get_suggested_users(viewer.id)
        assert len(suggested) == 5
        assert viewer.id not in {u.id for u in suggested}


class TestProfiles:
    """Identifier resolution and profile counts"""

    async def test_resolve_prefers_username(self, db, make_user):
        alice = await make_user("alice")
        users = UserService(db)

        by_name = await users.resolve("alice")
        assert by_name.kind == LookupKind.USERNAME
        assert by_name.user.id == alice.id

        by_id = await users.resolve(alice.id)
        assert by_id.kind == LookupKind.ID
        assert by_id.user.id == alice.id

        missing = await users.resolve("nobody")
        assert missing.kind == LookupKind.NOT_FOUND
        assert missing.user is None
        assert not missing.found

    async def test_profile_counts(self, db, make_user):
        alice = await make_user("alice", first_name="Alice")
        bob = await make_user("bob")
        carol = await make_user("carol")
        social = SocialService(db)
        await social.follow(bob.id, alice.id)
        await social.follow(carol.id, alice.id)
        await social.follow(alice.id, carol.id)
        await PostService(db).create_post(alice.id, "hello world")

        discovery = DiscoveryService(db)
        profile = await discovery.get_profile("alice", viewer_id=bob.id)
        assert profile["id"] == alice.id
        assert profile["first_name"] == "Alice"
        assert profile["followers_count"] == 2
        assert profile["following_count"] == 1
        assert profile["posts_count"] == 1
        assert profile["is_following"] is True
        assert "email" not in profile

        by_id = await discovery.get_profile(alice.id)
        assert by_id["is_following"] is False

        own = await discovery.get_profile(alice.id, viewer_id=alice.id)
        assert own["is_following"] is False

    async def test_missing_profile(self, db):
        assert await DiscoveryService(db).get_profile("nobody") is None
