#!/usr/bin/env python3
"""
JSONPlaceholder: a service client built on RestKit

A small consumer of the client core against https://jsonplaceholder.typicode.com:
- Typed models decoded through ``Target``
- One ``Service`` per resource, aggregated by a ``ServiceClient``
- Rate limiting and per-call cancellation
"""

import logging
from typing import List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from RestKit import (
    CancellationToken,
    Service,
    ServiceClient,
    Target,
    setup_logging,
    with_rate_limiter,
)

LOGGER = logging.getLogger(__name__)

BASE_URL = "https://jsonplaceholder.typicode.com"


class Post(BaseModel):
    """A post entry."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(default=0, alias="userId")
    id: int = 0
    title: str = ""
    body: str = ""


class PostService(Service):
    """Endpoints of the ``/posts`` resource."""

    def get(self, post_id: int, token: Optional[CancellationToken] = None) -> Post:
        post: Target[Post] = Target(Post)
        self.call("GET", f"posts/{post_id}", target=post, token=token)
        return post.value

    def list(self, token: Optional[CancellationToken] = None) -> List[Post]:
        posts: Target[List[Post]] = Target(List[Post])
        self.call("GET", "posts", target=posts, token=token)
        return posts.value

    def create(self, new_post: Post, token: Optional[CancellationToken] = None) -> Post:
        post: Target[Post] = Target(Post)
        self.call("POST", "posts", payload=new_post, target=post, token=token)
        return post.value

    def delete(self, post_id: int, token: Optional[CancellationToken] = None) -> httpx.Response:
        return self.call("DELETE", f"posts/{post_id}", token=token)


class JSONPlaceholderClient(ServiceClient):
    """Client for the JSONPlaceholder fake REST API."""

    services = {"posts": PostService}

    posts: PostService


def main():
    """Fetch, list, create, and delete posts against the live service."""

    setup_logging()

    with JSONPlaceholderClient(BASE_URL, with_rate_limiter("5/second")) as client:
        post = client.posts.get(1, token=CancellationToken(timeout=10))
        LOGGER.info("Fetched post %d: %s", post.id, post.title)

        posts = client.posts.list(token=CancellationToken(timeout=10))
        LOGGER.info("Number of posts: %d", len(posts))

        created = client.posts.create(
            Post(user_id=101, title="Blog post title", body="Blog post body"),
            token=CancellationToken(timeout=10),
        )
        LOGGER.info("Created post %d", created.id)

        response = client.posts.delete(1, token=CancellationToken(timeout=10))
        LOGGER.info("Deleted post 1: %d", response.status_code)


if __name__ == "__main__":
    main()
