"""Outward-facing projections of users and projects.

Public listings show an author's academic details only; admin listings show
the author's email instead. None of these views carry the password hash.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from showcase.models.project import Project
from showcase.models.user import User


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PublicAuthorView(CamelModel):
    id: int
    name: str
    university: str | None = None
    branch: str | None = None
    year: int | None = None


class AdminAuthorView(CamelModel):
    id: int
    name: str
    email: str


class UserView(CamelModel):
    id: int
    name: str
    email: str
    university: str | None = None
    branch: str | None = None
    year: int | None = None
    role: str
    avatar: str | None = None
    bio: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RoleView(CamelModel):
    id: int
    name: str
    email: str
    role: str


class LikeView(CamelModel):
    user: int
    created_at: datetime


class CommentView(CamelModel):
    id: str
    user: int
    text: str
    created_at: datetime


class PopulatedCommentView(CamelModel):
    id: str
    user: PublicAuthorView | None = None
    text: str
    created_at: datetime


class ProjectView(CamelModel):
    id: int
    title: str
    description: str
    technologies: list[str]
    category: str
    github_url: str | None = None
    live_url: str | None = None
    images: list[str]
    author: PublicAuthorView | None = None
    status: str
    featured: bool
    likes: list[LikeView]
    comments: list[CommentView]
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AdminProjectView(ProjectView):
    author: AdminAuthorView | None = None


def user_view(user: User) -> UserView:
    return UserView(
        id=user.id,
        name=user.name,
        email=user.email,
        university=user.university,
        branch=user.branch,
        year=user.year,
        role=user.role,
        avatar=user.avatar,
        bio=user.bio,
        is_active=user.is_active,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _project_fields(project: Project) -> dict:
    return {
        "id": project.id,
        "title": project.title,
        "description": project.description,
        "technologies": list(project.technologies or []),
        "category": project.category,
        "github_url": project.github_url,
        "live_url": project.live_url,
        "images": list(project.images or []),
        "status": project.status,
        "featured": bool(project.featured),
        "likes": [LikeView(user=like["user"], created_at=like["createdAt"]) for like in project.likes or []],
        "comments": [
            CommentView(
                id=comment["id"],
                user=comment["user"],
                text=comment["text"],
                created_at=comment["createdAt"],
            )
            for comment in project.comments or []
        ],
        "created_at": project.created_at,
        "updated_at": project.updated_at,
    }


def project_view(project: Project) -> ProjectView:
    author = PublicAuthorView.model_validate(project.author) if project.author else None
    return ProjectView(author=author, **_project_fields(project))


def admin_project_view(project: Project) -> AdminProjectView:
    author = AdminAuthorView.model_validate(project.author) if project.author else None
    return AdminProjectView(author=author, **_project_fields(project))


def populated_comment_view(comment: dict, author: User | None) -> PopulatedCommentView:
    return PopulatedCommentView(
        id=comment["id"],
        user=PublicAuthorView.model_validate(author) if author else None,
        text=comment["text"],
        created_at=comment["createdAt"],
    )
