# marketplace/routes/admin/blog_routes.py

from flask import Blueprint, jsonify, request

from marketplace.routes.guards import require_role, respond
from marketplace.services.blog.blog_service import BlogService

admin_blog_bp = Blueprint(
    "admin_blog_bp",
    __name__,
    url_prefix="/admin/blog",
)


@admin_blog_bp.before_request
def _admin_only():
    ok, resp, _ = require_role("admin")
    if not ok:
        return resp


# ------------------------------------------------------------
# Posts
# ------------------------------------------------------------
@admin_blog_bp.get("/posts")
def posts_api():
    posts = BlogService.list_posts(published_only=False)
    return jsonify(
        ok=True,
        count=len(posts),
        posts=[p.model_dump(mode="json") for p in posts],
        stats=BlogService.blog_stats(),
    ), 200


@admin_blog_bp.post("/posts")
def post_create_api():
    return respond(BlogService.create_post(request.get_json(silent=True) or {}), 201)


@admin_blog_bp.put("/posts/<post_id>")
def post_update_api(post_id: str):
    return respond(BlogService.update_post(post_id, request.get_json(silent=True) or {}))


@admin_blog_bp.delete("/posts/<post_id>")
def post_delete_api(post_id: str):
    return respond(BlogService.delete_post(post_id))


# ------------------------------------------------------------
# Comments
# ------------------------------------------------------------
@admin_blog_bp.get("/comments")
def comments_api():
    comments = BlogService.all_comments(request.args.get("status"))
    return jsonify(
        ok=True,
        count=len(comments),
        comments=[c.model_dump(mode="json") for c in comments],
        stats=BlogService.comment_stats(),
    ), 200


@admin_blog_bp.post("/comments/<comment_id>/reply")
def comment_reply_api(comment_id: str):
    text = (request.get_json(silent=True) or {}).get("text") or ""
    return respond(BlogService.add_reply(comment_id, text))


@admin_blog_bp.post("/comments/<comment_id>/spam")
def comment_spam_api(comment_id: str):
    return respond(BlogService.mark_spam(comment_id))


@admin_blog_bp.delete("/comments/<comment_id>")
def comment_delete_api(comment_id: str):
    return respond(BlogService.delete_comment(comment_id))


@admin_blog_bp.post("/comments/bulk-delete")
def comments_bulk_delete_api():
    ids = (request.get_json(silent=True) or {}).get("ids") or []
    return respond(BlogService.delete_comments(ids))
