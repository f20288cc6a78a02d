"""Initial schema - users, tickets, comments

Revision ID: 001
Revises:
Create Date: 2026-10-18

WHY: Creates the three tables the helpdesk needs: users (clients,
consultants, admins), tickets owned by a client and optionally assigned
to staff, and append-only ticket comments.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


USER_ROLE = sa.Enum('client', 'consultant', 'admin', name='userrole')
TICKET_STATUS = sa.Enum('open', 'in_progress', 'closed', name='ticketstatus')
TICKET_PRIORITY = sa.Enum('low', 'medium', 'high', name='ticketpriority')
TICKET_CATEGORY = sa.Enum(
    'general', 'bug', 'feature', 'question', 'support', name='ticketcategory'
)


def upgrade() -> None:
    """
    Create users, tickets and comments.

    WHY: Enum values are stored lowercase, matching the API. Indexes cover
    the scoped listing (client_id, created_at), the status counters and
    the per-ticket comment thread.
    """
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('role', USER_ROLE, nullable=False, server_default='client'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'tickets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('assigned_to', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
        sa.Column('status', TICKET_STATUS, nullable=False, server_default='open'),
        sa.Column('priority', TICKET_PRIORITY, nullable=False, server_default='medium'),
        sa.Column('category', TICKET_CATEGORY, nullable=False, server_default='general'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('closed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['users.id']),
        sa.ForeignKeyConstraint(['assigned_to'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tickets_client_id', 'tickets', ['client_id'])
    op.create_index('ix_tickets_status', 'tickets', ['status'])
    op.create_index('ix_tickets_assigned_to', 'tickets', ['assigned_to'])
    op.create_index('ix_tickets_created_at', 'tickets', ['created_at'])

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('ticket_id', sa.Integer(), nullable=False),
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('comment_text', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['ticket_id'], ['tickets.id']),
        sa.ForeignKeyConstraint(['author_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_comments_ticket_id', 'comments', ['ticket_id'])
    op.create_index('ix_comments_created_at', 'comments', ['created_at'])


def downgrade() -> None:
    """
    Drop comments, tickets and users, then their enum types.

    WHY: Downgrade allows rollback if issues are discovered after deployment.
    """
    op.drop_index('ix_comments_created_at', table_name='comments')
    op.drop_index('ix_comments_ticket_id', table_name='comments')
    op.drop_table('comments')

    op.drop_index('ix_tickets_created_at', table_name='tickets')
    op.drop_index('ix_tickets_assigned_to', table_name='tickets')
    op.drop_index('ix_tickets_status', table_name='tickets')
    op.drop_index('ix_tickets_client_id', table_name='tickets')
    op.drop_table('tickets')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (TICKET_CATEGORY, TICKET_PRIORITY, TICKET_STATUS, USER_ROLE):
        enum_type.drop(bind, checkfirst=True)
