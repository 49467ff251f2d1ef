"""
Blog Routes — Public reading, authoring, likes and comments.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.database import get_db, new_id
from app.models.blog import Blog
from app.models.user import User
from app.schemas.schemas import BlogRequest, BlogOut, CommentRequest, MessageResponse
from app.utils.auth import get_current_user, is_owner_or_admin

router = APIRouter(prefix="/api/blogs", tags=["Blogs"])


def _get_blog(db: Session, blog_id: str) -> Blog:
    blog = db.query(Blog).filter(Blog.id == blog_id).first()
    if not blog:
        raise HTTPException(status_code=404, detail="Blog not found")
    return blog


@router.get("", response_model=list[BlogOut])
def list_blogs(
    tag: Optional[str] = None,
    search: Optional[str] = None,
    author: Optional[str] = None,
    published: bool = True,
    db: Session = Depends(get_db),
):
    query = db.query(Blog).filter(Blog.published.is_(published))
    if author:
        query = query.filter(Blog.author_id == author)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Blog.title.ilike(pattern), Blog.content.ilike(pattern)))

    blogs = query.order_by(Blog.created_at.desc()).all()
    if tag:
        # Tags live in a JSON column; filter after loading
        blogs = [b for b in blogs if tag in (b.tags or [])]
    return blogs


@router.get("/{blog_id}", response_model=BlogOut)
def get_blog(blog_id: str, db: Session = Depends(get_db)):
    return _get_blog(db, blog_id)


@router.post("", response_model=BlogOut, status_code=201)
def create_blog(
    payload: BlogRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    blog = Blog(
        title=payload.title,
        content=payload.content,
        author_id=user.id,
        tags=payload.tags or [],
        published=bool(payload.published),
        thumbnail=payload.thumbnail or "",
    )
    db.add(blog)
    db.commit()
    db.refresh(blog)
    return blog


@router.put("/{blog_id}", response_model=BlogOut)
def update_blog(
    blog_id: str,
    payload: BlogRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    blog = _get_blog(db, blog_id)
    if not is_owner_or_admin(user, blog.author_id):
        raise HTTPException(status_code=403, detail="Not authorized to update this blog")

    blog.title = payload.title
    blog.content = payload.content
    blog.tags = payload.tags or []
    if payload.published is not None:
        blog.published = payload.published
    if payload.thumbnail is not None:
        blog.thumbnail = payload.thumbnail

    db.commit()
    db.refresh(blog)
    return blog


@router.delete("/{blog_id}", response_model=MessageResponse)
def delete_blog(
    blog_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    blog = _get_blog(db, blog_id)
    if not is_owner_or_admin(user, blog.author_id):
        raise HTTPException(status_code=403, detail="Not authorized to delete this blog")

    db.delete(blog)
    db.commit()
    return MessageResponse(message="Blog removed")


@router.post("/{blog_id}/like", response_model=BlogOut)
def toggle_like(
    blog_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Like, or unlike when the caller already liked the post."""
    blog = _get_blog(db, blog_id)
    likes = list(blog.likes or [])
    if user.id in likes:
        likes.remove(user.id)
    else:
        likes.append(user.id)
    blog.likes = likes

    db.commit()
    db.refresh(blog)
    return blog


@router.post("/{blog_id}/comments", response_model=BlogOut)
def add_comment(
    blog_id: str,
    payload: CommentRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    blog = _get_blog(db, blog_id)
    blog.comments = [
        *(blog.comments or []),
        {
            "_id": new_id(),
            "user": {"_id": user.id, "name": user.name},
            "content": payload.content,
            "createdAt": datetime.utcnow().isoformat(),
        },
    ]

    db.commit()
    db.refresh(blog)
    return blog
