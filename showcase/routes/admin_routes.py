import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from showcase.auth.dependencies import require_admin
from showcase.database import get_db
from showcase.errors import InvalidRole, NotFound, SelfDeletionForbidden, internal_fault
from showcase.models.project import Project
from showcase.models.user import Role, User
from showcase.routes.project_routes import mutate_project
from showcase.views import AdminProjectView, CamelModel, RoleView, UserView, admin_project_view, user_view

logger = logging.getLogger(__name__)

router = APIRouter(tags=['admin'])


class RoleUpdateRequest(CamelModel):
    role: str


class AdminStats(CamelModel):
    total_users: int
    total_projects: int
    total_admins: int
    total_likes: int
    total_comments: int


class AdminStatsResponse(CamelModel):
    stats: AdminStats
    projects: list[AdminProjectView]
    users: list[UserView]


class MessageResponse(CamelModel):
    message: str


class RoleUpdateResponse(CamelModel):
    message: str
    user: RoleView


class FeatureResponse(CamelModel):
    message: str
    featured: bool


@router.get('/stats', response_model=AdminStatsResponse)
def get_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        total_users = db.query(func.count(User.id)).scalar()
        total_projects = db.query(func.count(Project.id)).scalar()
        total_admins = db.query(func.count(User.id)).filter(User.role == Role.ADMIN.value).scalar()

        # Full scan: likes and comments live inside each project row.
        projects = db.query(Project).order_by(Project.created_at.desc(), Project.id.desc()).all()
        users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Admin stats query failed')
        raise internal_fault('Server error', exc) from exc

    stats = AdminStats(
        total_users=total_users,
        total_projects=total_projects,
        total_admins=total_admins,
        total_likes=sum(len(project.likes or []) for project in projects),
        total_comments=sum(len(project.comments or []) for project in projects),
    )
    return AdminStatsResponse(
        stats=stats,
        projects=[admin_project_view(project) for project in projects],
        users=[user_view(user) for user in users],
    )


@router.delete('/projects/{project_id}', response_model=MessageResponse)
def delete_project(project_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        deleted = db.query(Project).filter(Project.id == project_id).delete(synchronize_session='fetch')
        if not deleted:
            raise NotFound('Project not found')
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Deleting project %s failed', project_id)
        raise internal_fault('Server error', exc) from exc

    logger.info('Admin %s deleted project %s', admin.id, project_id)
    return MessageResponse(message='Project deleted successfully')


@router.delete('/users/{user_id}', response_model=MessageResponse)
def delete_user(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        user = db.get(User, user_id)
        if user is None:
            raise NotFound('User not found')

        if user.id == admin.id:
            raise SelfDeletionForbidden()

        # Projects go first and both deletes share one commit.
        deleted_projects = (
            db.query(Project).filter(Project.author_id == user.id).delete(synchronize_session='fetch')
        )
        db.delete(user)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Deleting user %s failed', user_id)
        raise internal_fault('Server error', exc) from exc

    logger.info('Admin %s deleted user %s and %s of their projects', admin.id, user_id, deleted_projects)
    return MessageResponse(message='User and their projects deleted successfully')


@router.put('/users/{user_id}/role', response_model=RoleUpdateResponse)
def update_user_role(
    user_id: int,
    data: RoleUpdateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        role = Role(data.role)
    except ValueError as exc:
        raise InvalidRole() from exc

    try:
        user = db.get(User, user_id)
        if user is None:
            raise NotFound('User not found')

        user.role = role.value
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Updating role for user %s failed', user_id)
        raise internal_fault('Server error', exc) from exc

    logger.info('Admin %s set role of user %s to %s', admin.id, user_id, role.value)
    return RoleUpdateResponse(
        message='User role updated successfully',
        user=RoleView(id=user.id, name=user.name, email=user.email, role=user.role),
    )


@router.put('/projects/{project_id}/feature', response_model=FeatureResponse)
def toggle_featured(project_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    def flip(project: Project) -> bool:
        project.featured = not project.featured
        return project.featured

    _, featured = mutate_project(db, project_id, flip)
    return FeatureResponse(
        message=f'Project {"featured" if featured else "unfeatured"} successfully',
        featured=featured,
    )
