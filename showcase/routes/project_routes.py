import logging
from typing import Callable, TypeVar
from uuid import uuid4

from fastapi import APIRouter, Depends, Query, status
from pydantic import field_validator
from sqlalchemy import String, cast, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from showcase.auth.dependencies import get_current_user
from showcase.database import get_db
from showcase.errors import Forbidden, NotFound, internal_fault
from showcase.models.project import (
    COMMENT_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    GITHUB_URL_PREFIX,
    PROJECT_CATEGORIES,
    PROJECT_STATUSES,
    STATUS_PUBLISHED,
    TITLE_MAX_LENGTH,
    Project,
)
from showcase.models.user import User, utcnow
from showcase.views import (
    CamelModel,
    PopulatedCommentView,
    ProjectView,
    populated_comment_view,
    project_view,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=['projects'])

MAX_WRITE_ATTEMPTS = 3

T = TypeVar('T')


def _validate_title(value: str | None) -> str:
    normalized = (value or '').strip()
    if not normalized:
        raise ValueError('Title is required.')
    if len(normalized) > TITLE_MAX_LENGTH:
        raise ValueError(f'Title must be {TITLE_MAX_LENGTH} characters or fewer.')
    return normalized


def _validate_description(value: str | None) -> str:
    if value is None or not value.strip():
        raise ValueError('Description is required.')
    if len(value) > DESCRIPTION_MAX_LENGTH:
        raise ValueError(f'Description must be {DESCRIPTION_MAX_LENGTH} characters or fewer.')
    return value


def _validate_technologies(value: list[str] | None) -> list[str]:
    if value is None:
        raise ValueError('Technologies are required.')
    normalized = [technology.strip() for technology in value]
    if any(not technology for technology in normalized):
        raise ValueError('Technologies cannot contain empty entries.')
    return normalized


def _validate_category(value: str | None) -> str:
    if value not in PROJECT_CATEGORIES:
        raise ValueError(f'Category must be one of: {", ".join(PROJECT_CATEGORIES)}.')
    return value


def _validate_github_url(value: str | None) -> str | None:
    if not value:
        return None
    if not value.startswith(GITHUB_URL_PREFIX):
        raise ValueError(f'GitHub URL must start with {GITHUB_URL_PREFIX}')
    return value


class ProjectFieldsModel(CamelModel):
    """Field rules shared by project create and update bodies."""

    @field_validator('title', check_fields=False)
    @classmethod
    def validate_title(cls, value: str | None) -> str:
        return _validate_title(value)

    @field_validator('description', check_fields=False)
    @classmethod
    def validate_description(cls, value: str | None) -> str:
        return _validate_description(value)

    @field_validator('technologies', check_fields=False)
    @classmethod
    def validate_technologies(cls, value: list[str] | None) -> list[str]:
        return _validate_technologies(value)

    @field_validator('category', check_fields=False)
    @classmethod
    def validate_category(cls, value: str | None) -> str:
        return _validate_category(value)

    @field_validator('github_url', check_fields=False)
    @classmethod
    def validate_github_url(cls, value: str | None) -> str | None:
        return _validate_github_url(value)


class ProjectCreateRequest(ProjectFieldsModel):
    title: str
    description: str
    technologies: list[str]
    category: str
    github_url: str | None = None
    live_url: str | None = None


class ProjectUpdateRequest(ProjectFieldsModel):
    """Partial update; only fields present in the request body are applied."""

    title: str | None = None
    description: str | None = None
    technologies: list[str] | None = None
    category: str | None = None
    github_url: str | None = None
    live_url: str | None = None
    images: list[str] | None = None
    status: str | None = None

    @field_validator('images')
    @classmethod
    def validate_images(cls, value: list[str] | None) -> list[str]:
        if value is None:
            raise ValueError('Images cannot be null.')
        return value

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str | None) -> str:
        if value not in PROJECT_STATUSES:
            raise ValueError(f'Status must be one of: {", ".join(PROJECT_STATUSES)}.')
        return value


class CommentRequest(CamelModel):
    text: str

    @field_validator('text')
    @classmethod
    def validate_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Comment text is required')
        if len(normalized) > COMMENT_MAX_LENGTH:
            raise ValueError(f'Comment must be {COMMENT_MAX_LENGTH} characters or fewer')
        return normalized


class ProjectListResponse(CamelModel):
    message: str
    projects: list[ProjectView]
    count: int


class ProjectResponse(CamelModel):
    message: str
    project: ProjectView


class LikeResponse(CamelModel):
    message: str
    likes_count: int
    is_liked: bool


class CommentResponse(CamelModel):
    message: str
    comment: PopulatedCommentView
    total_comments: int


def mutate_project(db: Session, project_id: int, mutation: Callable[[Project], T]) -> tuple[Project, T]:
    """Apply ``mutation`` to a project and commit it as a conditional write.

    The project's version column makes the UPDATE fail with ``StaleDataError``
    when another request committed first; the project is then re-read and the
    mutation re-applied to the fresh state.
    """
    for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
        try:
            project = db.get(Project, project_id, populate_existing=attempt > 1)
            if project is None:
                raise NotFound('Project not found')

            result = mutation(project)
            db.commit()
            return project, result
        except StaleDataError:
            db.rollback()
            logger.warning(
                'Project %s changed concurrently (attempt %s of %s)',
                project_id,
                attempt,
                MAX_WRITE_ATTEMPTS,
            )
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception('Updating project %s failed', project_id)
            raise internal_fault('Server error', exc) from exc

    raise internal_fault('Project was modified concurrently, please retry')


@router.get('', response_model=ProjectListResponse)
def list_projects(
    category: str | None = Query(default=None),
    search: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    try:
        query = db.query(Project).filter(Project.status == STATUS_PUBLISHED)

        if category:
            query = query.filter(Project.category == category)

        term = (search or '').strip()
        if term:
            query = query.filter(
                or_(
                    Project.title.icontains(term, autoescape=True),
                    Project.description.icontains(term, autoescape=True),
                    cast(Project.technologies, String).icontains(term, autoescape=True),
                )
            )

        projects = query.order_by(Project.created_at.desc(), Project.id.desc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Listing projects failed')
        raise internal_fault('Server error', exc) from exc

    return ProjectListResponse(
        message='Projects fetched successfully',
        projects=[project_view(project) for project in projects],
        count=len(projects),
    )


@router.post('', response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        project = Project(
            title=data.title,
            description=data.description,
            technologies=data.technologies,
            category=data.category,
            github_url=data.github_url,
            live_url=data.live_url,
            images=[],
            author_id=current_user.id,
            status=STATUS_PUBLISHED,
            featured=False,
            likes=[],
            comments=[],
        )
        db.add(project)
        db.commit()
        db.refresh(project)

        logger.info('User %s created project %s', current_user.id, project.id)
        return ProjectResponse(message='Project created successfully', project=project_view(project))
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Creating project failed')
        raise internal_fault('Server error', exc) from exc


@router.put('/{project_id}', response_model=ProjectResponse)
def update_project(
    project_id: int,
    data: ProjectUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    changes = data.model_dump(exclude_unset=True)

    def apply(project: Project) -> None:
        if project.author_id != current_user.id:
            raise Forbidden('Not authorized to update this project')
        for field, value in changes.items():
            setattr(project, field, value)

    project, _ = mutate_project(db, project_id, apply)
    return ProjectResponse(message='Project updated successfully', project=project_view(project))


@router.post('/{project_id}/like', response_model=LikeResponse)
def toggle_like(
    project_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user_id = current_user.id

    def toggle(project: Project) -> tuple[bool, int]:
        likes = list(project.likes or [])
        remaining = [like for like in likes if like['user'] != user_id]
        if len(remaining) != len(likes):
            project.likes = remaining
            return False, len(remaining)
        project.likes = likes + [{'user': user_id, 'createdAt': utcnow().isoformat()}]
        return True, len(project.likes)

    _, (is_liked, likes_count) = mutate_project(db, project_id, toggle)
    return LikeResponse(
        message='Project liked successfully' if is_liked else 'Project unliked successfully',
        likes_count=likes_count,
        is_liked=is_liked,
    )


@router.post('/{project_id}/comment', response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def add_comment(
    project_id: int,
    data: CommentRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    def append(project: Project) -> tuple[dict, int]:
        comment = {
            'id': uuid4().hex,
            'user': current_user.id,
            'text': data.text,
            'createdAt': utcnow().isoformat(),
        }
        project.comments = list(project.comments or []) + [comment]
        return comment, len(project.comments)

    _, (comment, total_comments) = mutate_project(db, project_id, append)
    return CommentResponse(
        message='Comment added successfully',
        comment=populated_comment_view(comment, current_user),
        total_comments=total_comments,
    )
