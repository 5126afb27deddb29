"""
Demo content for local development.
"""

from __future__ import annotations

import logging

from blog_backend.db import DbClient, NewCategory, NewComment, NewPost, NewTag

logger = logging.getLogger(__name__)

DEMO_CATEGORIES = [
    ("Programming", "programming", "Programming related content"),
    ("Web Development", "web-development", "Web development tutorials and tips"),
    ("Design", "design", "Design inspiration and resources"),
    ("DevOps", "devops", "DevOps techniques and practices"),
]

DEMO_TAGS = [
    ("JavaScript", "javascript"),
    ("React", "react"),
    ("CSS", "css"),
    ("Node.js", "nodejs"),
    ("Express", "express"),
    ("TypeScript", "typescript"),
    ("UI/UX", "ui-ux"),
]

DEMO_POSTS = [
    {
        "title": "Getting Started with React",
        "slug": "getting-started-with-react",
        "content": (
            "# Getting Started with React\n\n"
            "React is a JavaScript library for building user interfaces.\n\n"
            "## Why React?\n\n"
            "React lets you build complex UIs from small, isolated components.\n\n"
            "```javascript\n"
            "function HelloWorld() {\n"
            "  return <h1>Hello, world!</h1>;\n"
            "}\n"
            "```\n\n"
            "## Hooks\n\n"
            "Hooks let you use state without writing a class.\n"
        ),
        "excerpt": (
            "Learn the basics of React and get started with building user "
            "interfaces using components and hooks."
        ),
        "author": "Alex Johnson",
        "category": "programming",
        "tags": ["react", "typescript"],
    },
    {
        "title": "CSS Grid Layout: A Comprehensive Guide",
        "slug": "css-grid-layout-comprehensive-guide",
        "content": (
            "# CSS Grid Layout\n\n"
            "CSS Grid Layout creates two-dimensional layouts on the web.\n\n"
            "```css\n"
            ".container {\n"
            "  display: grid;\n"
            "  grid-template-columns: repeat(3, 1fr);\n"
            "  grid-gap: 20px;\n"
            "}\n"
            "```\n"
        ),
        "excerpt": (
            "Master CSS Grid Layout: grid containers, items, lines and areas "
            "for powerful layouts."
        ),
        "author": "Sarah Chen",
        "category": "design",
        "tags": ["css", "ui-ux"],
    },
    {
        "title": "Introduction to Express.js",
        "slug": "introduction-to-expressjs",
        "content": (
            "# Introduction to Express.js\n\n"
            "Express.js is a minimal and flexible Node.js web framework.\n\n"
            "```bash\n"
            "npm install express\n"
            "```\n\n"
            "## Routing\n\n"
            "Express responds to HTTP methods with routes and middleware.\n"
        ),
        "excerpt": (
            "Learn the basics of Express.js, a flexible Node.js web application "
            "framework."
        ),
        "author": "Michael Brown",
        "category": "web-development",
        "tags": ["nodejs", "express"],
    },
    {
        "title": "Understanding Docker for Development",
        "slug": "understanding-docker-for-development",
        "content": (
            "# Understanding Docker for Development\n\n"
            "Docker runs applications in lightweight containers.\n\n"
            "```bash\n"
            "docker run -d -p 3000:3000 --name my-node-app node:14\n"
            "```\n"
        ),
        "excerpt": (
            "Containers, basic Docker commands, Dockerfiles and Docker Compose "
            "for a better development workflow."
        ),
        "author": "David Wilson",
        "category": "devops",
        "tags": [],
    },
]

DEMO_COMMENTS = {
    "getting-started-with-react": [
        (
            "Jane Doe",
            "jane@example.com",
            "Great introduction to React! Looking forward to more tutorials.",
        ),
        (
            "John Smith",
            "john@example.com",
            "I'm having trouble with hooks. Could you explain them more?",
        ),
    ],
}


def seed_demo_content(db: DbClient) -> bool:
    """
    Insert demo categories, tags, posts and comments.

    Returns False without touching anything when categories already exist.
    """
    if db.get_all_categories():
        logger.info("Database already has content, skipping seed")
        return False

    categories = {}
    for name, slug, description in DEMO_CATEGORIES:
        categories[slug] = db.create_category(
            NewCategory(name=name, slug=slug, description=description)
        )

    tags = {}
    for name, slug in DEMO_TAGS:
        tags[slug] = db.create_tag(NewTag(name=name, slug=slug))

    for demo in DEMO_POSTS:
        post = db.create_post(
            NewPost(
                title=demo["title"],
                slug=demo["slug"],
                content=demo["content"],
                excerpt=demo["excerpt"],
                author=demo["author"],
                category_id=categories[demo["category"]].id,
            )
        )
        db.set_post_tags(post.id, [tags[slug].id for slug in demo["tags"]])
        for author_name, author_email, content in DEMO_COMMENTS.get(post.slug, []):
            db.create_comment(
                NewComment(
                    content=content,
                    author_name=author_name,
                    author_email=author_email,
                    post_id=post.id,
                )
            )

    logger.info(
        "Seeded %d categories, %d tags and %d posts",
        len(categories),
        len(tags),
        len(DEMO_POSTS),
    )
    return True
