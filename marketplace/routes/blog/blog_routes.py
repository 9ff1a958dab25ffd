# marketplace/routes/blog/blog_routes.py

import uuid

from flask import Blueprint, jsonify, request, session

from marketplace.identity import get_identity
from marketplace.routes.guards import respond
from marketplace.services.blog.blog_service import BlogService

blog_bp = Blueprint(
    "blog_bp",
    __name__,
    url_prefix="/blog",
)


@blog_bp.get("/posts")
def posts_api():
    posts = BlogService.list_posts(published_only=True)
    category = request.args.get("category")
    if category and category != "all":
        posts = [p for p in posts if p.category == category]
    return jsonify(
        ok=True,
        count=len(posts),
        posts=[p.model_dump(mode="json") for p in posts],
    ), 200


@blog_bp.get("/posts/<post_id>")
def post_detail_api(post_id: str):
    post = BlogService.get_post(post_id, published_only=True)
    if not post:
        return jsonify(ok=False, error="not_found", message="Post not found"), 404
    return jsonify(
        ok=True,
        post=post.model_dump(mode="json"),
        comments=[c.model_dump(mode="json") for c in BlogService.post_comments(post_id)],
    ), 200


@blog_bp.post("/posts/<post_id>/views")
def post_view_api(post_id: str):
    """One view per logged-in account per post; guests are tracked per session."""
    ident = get_identity()
    if ident.is_logged_in:
        viewer = ident.user_id
    else:
        viewer = session.setdefault("viewer_id", f"guest-{uuid.uuid4().hex}")
    return respond(BlogService.record_view(post_id, viewer))


@blog_bp.get("/posts/<post_id>/comments")
def comments_api(post_id: str):
    comments = BlogService.post_comments(post_id)
    return jsonify(
        ok=True,
        count=len(comments),
        comments=[c.model_dump(mode="json") for c in comments],
    ), 200


@blog_bp.post("/posts/<post_id>/comments")
def comment_submit_api(post_id: str):
    return respond(BlogService.submit_comment(post_id, request.get_json(silent=True) or {}), 201)
