from socialfeed.models import Follow, Post
from socialfeed.services.feed import FeedService, PostService, clamp_page
from socialfeed.services.social import InteractionService, SocialService


class TestPaging:
    def test_defaults(self):
        assert clamp_page(None, None) == (50, 0)

    def test_caps_limit_and_floors_offset(self):
        assert clamp_page(500, -3) == (100, 0)
        assert clamp_page(0, 7) == (1, 7)


class TestPersonalizedFeed:
    """Feed built from followed users plus the viewer"""

    async def test_follows_nobody_sees_own_posts(self, db, make_user):
        """A user who follows nobody gets exactly their own posts, newest first"""
        alice = await make_user("alice")
        bob = await make_user("bob")
        posts = PostService(db)

        await posts.create_post(alice.id, "first")
        await posts.create_post(bob.id, "not mine")
        await posts.create_post(alice.id, "second")

        feed = await FeedService(db).get_feed(alice.id)
        assert [p["content"] for p in feed] == ["second", "first"]
        assert all(p["author"]["username"] == "alice" for p in feed)

    async def test_union_of_followed_authors(self, db, make_user):
        """Posts from every followed author appear once, globally ordered"""
        alice = await make_user("alice")
        bob = await make_user("bob")
        carol = await make_user("carol")
        dave = await make_user("dave")
        social = SocialService(db)
        posts = PostService(db)

        await social.follow(alice.id, bob.id)
        await social.follow(alice.id, carol.id)

        await posts.create_post(bob.id, "bob 1")
        await posts.create_post(dave.id, "dave 1")
        await posts.create_post(carol.id, "carol 1")
        await posts.create_post(alice.id, "alice 1")
        await posts.create_post(bob.id, "bob 2")

        feed = await FeedService(db).get_feed(alice.id)
        assert [p["content"] for p in feed] == ["bob 2", "alice 1", "carol 1", "bob 1"]
        assert len({p["id"] for p in feed}) == len(feed)

    async def test_self_edge_does_not_duplicate_own_posts(self, db, make_user):
        """A viewer who is also in their own follow set sees each post once"""
        alice = await make_user("alice")
        bob = await make_user("bob")
        posts = PostService(db)
        await SocialService(db).follow(alice.id, bob.id)
        db.add(Follow(follower_id=alice.id, following_id=alice.id))
        await db.commit()

        await posts.create_post(alice.id, "alice 1")
        await posts.create_post(bob.id, "bob 1")
        await posts.create_post(alice.id, "alice 2")

        feed = await FeedService(db).get_feed(alice.id)
        assert [p["content"] for p in feed] == ["alice 2", "bob 1", "alice 1"]

    async def test_unfollow_removes_author(self, db, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        social = SocialService(db)
        await social.follow(alice.id, bob.id)
        await PostService(db).create_post(bob.id, "bob 1")

        feed_service = FeedService(db)
        assert len(await feed_service.get_feed(alice.id)) == 1

        await social.unfollow(alice.id, bob.id)
        assert await feed_service.get_feed(alice.id) == []


class TestPostViews:
    """Global feed and single-post reads"""

    async def test_global_feed_pagination(self, db, make_user):
        """Pages are slices of the newest-first sequence"""
        alice = await make_user("alice")
        posts = PostService(db)
        for i in range(5):
            await posts.create_post(alice.id, f"post {i}")

        feed_service = FeedService(db)
        page = await feed_service.get_posts(limit=2, offset=1)
        assert [p["content"] for p in page] == ["post 3", "post 2"]

        everything = await feed_service.get_posts()
        assert len(everything) == 5

    async def test_viewer_dependent_fields(self, db, make_user):
        """Counts are global; isLiked belongs to the viewer"""
        alice = await make_user("alice")
        bob = await make_user("bob")
        post = await PostService(db).create_post(alice.id, "hello world")
        interactions = InteractionService(db)
        await interactions.like(bob.id, post.id)
        await interactions.add_comment(alice.id, post.id, "thanks")

        feed_service = FeedService(db)
        as_bob = await feed_service.get_post(post.id, bob.id)
        as_alice = await feed_service.get_post(post.id, alice.id)
        anonymous = await feed_service.get_post(post.id)

        assert as_bob["likes_count"] == 1
        assert as_bob["comments_count"] == 1
        assert as_bob["is_liked"] is True
        assert as_alice["is_liked"] is False
        assert anonymous["is_liked"] is False
        assert anonymous["likes_count"] == 1
        assert anonymous["author"]["id"] == alice.id

    async def test_orphan_post_is_not_listed(self, db, make_user):
        """Posts whose author record is missing are excluded"""
        alice = await make_user("alice")
        await PostService(db).create_post(alice.id, "visible")
        orphan = Post(user_id="missing-user", content="orphan")
        db.add(orphan)
        await db.commit()

        feed_service = FeedService(db)
        assert [p["content"] for p in await feed_service.get_posts()] == ["visible"]
        assert await feed_service.get_post(orphan.id) is None

    async def test_user_posts_only_that_author(self, db, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        posts = PostService(db)
        await posts.create_post(alice.id, "a")
        await posts.create_post(bob.id, "b")

        result = await FeedService(db).get_user_posts(bob.id, alice.id)
        assert [p["content"] for p in result] == ["b"]


class TestPostOwnership:
    """Edits and deletes through the content store"""

    async def test_non_owner_cannot_update_or_delete(self, db, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        posts = PostService(db)
        post = await posts.create_post(alice.id, "original")

        assert await posts.update_post(post.id, bob.id, "hijacked") is None
        assert await posts.delete_post(post.id, bob.id) is False

        stored = await posts.get_post(post.id)
        assert stored.content == "original"

    async def test_owner_update_replaces_content(self, db, make_user):
        alice = await make_user("alice")
        posts = PostService(db)
        post = await posts.create_post(alice.id, "original", "https://example.com/a.png")

        updated = await posts.update_post(post.id, alice.id, "edited")
        assert updated.content == "edited"
        assert updated.image_url is None
        assert updated.updated_at >= updated.created_at

    async def test_delete_removes_likes_and_comments(self, db, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        posts = PostService(db)
        interactions = InteractionService(db)
        post = await posts.create_post(alice.id, "short lived")
        await interactions.like(bob.id, post.id)
        await interactions.add_comment(bob.id, post.id, "nice")

        assert await posts.delete_post(post.id, alice.id) is True
        assert await posts.get_post(post.id) is None
        assert await interactions.count_likes(post.id) == 0
        assert await interactions.count_comments(post.id) == 0

    async def test_list_by_author(self, db, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        posts = PostService(db)
        await posts.create_post(alice.id, "a1")
        await posts.create_post(bob.id, "b1")
        await posts.create_post(alice.id, "a2")

        result = await posts.list_by_author(alice.id)
        assert [p.content for p in result] == ["a2", "a1"]
        assert [p.content for p in await posts.list_by_author(alice.id, limit=1, offset=1)] == ["a1"]
