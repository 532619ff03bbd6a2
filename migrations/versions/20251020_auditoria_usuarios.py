"""auditoría de cambios administrativos sobre usuarios"""
from alembic import op
import sqlalchemy as sa

revision = "20251020_auditoria_usuarios"
down_revision = "20251019_esquema_inicial"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "auditoria_usuarios",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("fecha", sa.DateTime(), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("accion", sa.String(length=20), nullable=False),
        sa.Column("objetivo_id", sa.Integer(), nullable=True),
        sa.Column("detalle", sa.JSON(), nullable=False),
        sa.Column("ip", sa.String(length=64), nullable=True),
        sa.Column("agente_usuario", sa.String(length=256), nullable=True),
    )
    op.create_index("ix_auditoria_usuarios_fecha", "auditoria_usuarios", ["fecha"])
    op.create_index("ix_auditoria_usuarios_objetivo_id", "auditoria_usuarios", ["objetivo_id"])


def downgrade():
    op.drop_index("ix_auditoria_usuarios_objetivo_id", table_name="auditoria_usuarios")
    op.drop_index("ix_auditoria_usuarios_fecha", table_name="auditoria_usuarios")
    op.drop_table("auditoria_usuarios")
