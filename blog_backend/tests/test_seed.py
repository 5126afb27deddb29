import unittest

from blog_backend.memory_db import InMemoryDbClient
from blog_backend.seed import DEMO_CATEGORIES, DEMO_POSTS, DEMO_TAGS, seed_demo_content
from blog_backend.sql_db import PostgresDbClient


class SeedDemoContentTests(unittest.TestCase):
    def test_seeds_empty_store_once(self):
        db = InMemoryDbClient()

        self.assertTrue(seed_demo_content(db))
        self.assertFalse(seed_demo_content(db))

        self.assertEqual(len(db.get_all_categories()), len(DEMO_CATEGORIES))
        self.assertEqual(len(db.get_all_tags()), len(DEMO_TAGS))
        self.assertEqual(len(db.get_all_posts()), len(DEMO_POSTS))

    def test_seeded_posts_carry_tags_and_comments(self):
        db = PostgresDbClient("sqlite+pysqlite:///:memory:")
        seed_demo_content(db)

        post = db.get_post_by_slug("getting-started-with-react")
        self.assertIsNotNone(post)
        self.assertEqual(
            {tag.slug for tag in db.get_tags_by_post_id(post.id)}, {"react", "typescript"}
        )
        self.assertEqual(len(db.get_comments_by_post_id(post.id)), 2)

        category = db.get_category_by_slug("devops")
        self.assertEqual(
            [p.slug for p in db.get_posts_by_category(category.id)],
            ["understanding-docker-for-development"],
        )


if __name__ == "__main__":
    unittest.main()
