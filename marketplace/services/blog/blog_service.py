# marketplace/services/blog/blog_service.py

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from marketplace import records
from marketplace.models.blog_models import (
    BlogPost,
    Comment,
    CommentStatus,
    CommentSubmitModel,
    PostSaveModel,
    PostStatus,
    PostView,
    Reply,
)
from marketplace.records import BLOG_COMMENTS, BLOG_POSTS, POST_VIEWS, StorageUnavailable


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _ms(now: datetime) -> int:
    return int(now.timestamp() * 1000)


class BlogService:

    # =========================
    # POSTS
    # =========================
    @staticmethod
    def list_posts(published_only: bool = True) -> List[BlogPost]:
        query = {"status": PostStatus.published.value} if published_only else None
        return records.load_records(BLOG_POSTS, BlogPost, query=query, sort=[("date", -1)])

    @staticmethod
    def get_post(post_id: str, published_only: bool = False) -> Optional[BlogPost]:
        post = records.find_record(BLOG_POSTS, BlogPost, {"id": post_id})
        if post and published_only and post.status != PostStatus.published:
            return None
        return post

    @staticmethod
    def create_post(payload: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or _now()
        try:
            data = PostSaveModel.model_validate(payload or {})
        except ValidationError as e:
            return records.invalid(records.first_error(e))

        post = BlogPost(
            id=f"post_{_ms(now)}",
            date=now.date().isoformat(),
            views=0,
            **data.model_dump(),
        )
        try:
            records.save_record(BLOG_POSTS, post)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(post=post.model_dump(mode="json"))

    @staticmethod
    def update_post(post_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        post = BlogService.get_post(post_id)
        if not post:
            return records.not_found("Post not found")
        try:
            data = PostSaveModel.model_validate({**post.model_dump(), **(payload or {})})
        except ValidationError as e:
            return records.invalid(records.first_error(e))

        # views and date are not editable
        updated = post.model_copy(update=data.model_dump())
        try:
            records.save_record(BLOG_POSTS, updated)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(post=updated.model_dump(mode="json"))

    @staticmethod
    def delete_post(post_id: str) -> Dict[str, Any]:
        try:
            deleted = records.delete_record(BLOG_POSTS, post_id)
            if deleted:
                comment_ids = [c.id for c in records.load_records(BLOG_COMMENTS, Comment, query={"postId": post_id})]
                records.delete_records(BLOG_COMMENTS, comment_ids)
        except StorageUnavailable:
            return records.unavailable()
        if not deleted:
            return records.not_found("Post not found")
        return records.ok()

    @staticmethod
    def record_view(post_id: str, viewer_id: Optional[str]) -> Dict[str, Any]:
        """Counts at most one view per viewer per post. Anonymous views are not counted."""
        post = BlogService.get_post(post_id, published_only=True)
        if not post:
            return records.not_found("Post not found")
        if not viewer_id:
            return records.ok(counted=False, views=post.views)

        view_id = f"{post_id}:{viewer_id}"
        if records.find_record(POST_VIEWS, PostView, {"id": view_id}):
            return records.ok(counted=False, views=post.views)

        view = PostView(id=view_id, postId=post_id, viewerId=viewer_id, viewedAt=_now().isoformat())
        try:
            records.save_record(POST_VIEWS, view)
            records.update_fields(BLOG_POSTS, {"id": post_id}, {"$inc": {"views": 1}})
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(counted=True, views=post.views + 1)

    @staticmethod
    def blog_stats() -> Dict[str, int]:
        posts = BlogService.list_posts(published_only=False)
        approved = BlogService.all_comments(CommentStatus.approved.value)
        return {
            "totalPosts": len(posts),
            "totalComments": len(approved),
            "totalViews": sum(p.views for p in posts),
            "categories": len({p.category for p in posts if p.category}),
        }

    # =========================
    # COMMENTS
    # =========================
    @staticmethod
    def all_comments(status: Optional[str] = None) -> List[Comment]:
        query = {"status": status} if status and status != "all" else None
        return records.load_records(BLOG_COMMENTS, Comment, query=query, sort=[("date", -1)])

    @staticmethod
    def post_comments(post_id: str) -> List[Comment]:
        return records.load_records(
            BLOG_COMMENTS,
            Comment,
            query={"postId": post_id, "status": CommentStatus.approved.value},
            sort=[("date", -1)],
        )

    @staticmethod
    def submit_comment(post_id: str, payload: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or _now()
        if not BlogService.get_post(post_id, published_only=True):
            return records.not_found("Post not found")
        try:
            data = CommentSubmitModel.model_validate(payload or {})
        except ValidationError as e:
            return records.invalid(records.first_error(e, with_field=False))

        comment = Comment(
            id=f"comment_{_ms(now)}",
            postId=post_id,
            date=now.isoformat(),
            status=CommentStatus.approved,
            **data.model_dump(),
        )
        try:
            records.save_record(BLOG_COMMENTS, comment)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(comment=comment.model_dump(mode="json"))

    @staticmethod
    def _get_comment(comment_id: str) -> Optional[Comment]:
        return records.find_record(BLOG_COMMENTS, Comment, {"id": comment_id})

    @staticmethod
    def _save_comment(comment: Comment) -> Dict[str, Any]:
        try:
            records.save_record(BLOG_COMMENTS, comment)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(comment=comment.model_dump(mode="json"))

    @staticmethod
    def add_reply(comment_id: str, text: str, name: str = "Admin", is_admin: bool = True,
                  now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or _now()
        text = (text or "").strip()
        if not text:
            return records.invalid("Reply text is required")
        comment = BlogService._get_comment(comment_id)
        if not comment:
            return records.not_found("Comment not found")

        reply = Reply(id=f"reply_{_ms(now)}", name=name, text=text, date=now.isoformat(), isAdmin=is_admin)
        return BlogService._save_comment(comment.model_copy(update={"replies": comment.replies + [reply]}))

    @staticmethod
    def mark_spam(comment_id: str) -> Dict[str, Any]:
        comment = BlogService._get_comment(comment_id)
        if not comment:
            return records.not_found("Comment not found")
        return BlogService._save_comment(comment.model_copy(update={"status": CommentStatus.spam}))

    @staticmethod
    def delete_comment(comment_id: str) -> Dict[str, Any]:
        return BlogService.delete_comments([comment_id])

    @staticmethod
    def delete_comments(comment_ids: List[str]) -> Dict[str, Any]:
        if not comment_ids:
            return records.invalid("Please select comments to delete.")
        try:
            n = records.delete_records(BLOG_COMMENTS, comment_ids)
        except StorageUnavailable:
            return records.unavailable()
        if not n:
            return records.not_found("Comment not found")
        return records.ok(deleted=n)

    @staticmethod
    def comment_stats() -> Dict[str, int]:
        comments = BlogService.all_comments()
        return {
            "totalComments": len(comments),
            "approvedComments": sum(1 for c in comments if c.status == CommentStatus.approved),
            "spamComments": sum(1 for c in comments if c.status == CommentStatus.spam),
            "totalReplies": sum(len(c.replies) for c in comments),
        }
