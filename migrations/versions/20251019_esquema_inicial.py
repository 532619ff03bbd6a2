"""esquema inicial: usuarios, eólicos, alquileres, cuotas, lecturas y bitácora"""
from alembic import op
import sqlalchemy as sa

revision = "20251019_esquema_inicial"
down_revision = None
branch_labels = None
depends_on = None

SOLO_ACTIVOS = sa.text("estado = 'activo'")


def _money(name, nullable=False):
    if nullable:
        return sa.Column(name, sa.Numeric(12, 2), nullable=True)
    return sa.Column(name, sa.Numeric(12, 2), nullable=False, server_default="0.00")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=64), nullable=False, unique=True),
        sa.Column("email", sa.String(length=254), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="user"),
        sa.Column("full_name", sa.String(length=160), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("failed_logins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("lock_until", sa.DateTime(), nullable=True),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_username", "users", ["username"])
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "eolicos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("codigo", sa.String(length=20), nullable=False, unique=True),
        _money("tarifa_mes"),
        _money("costo_instalacion"),
        _money("deposito"),
        _money("costo_operativo_dia"),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("habilitado", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("usuario_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("fecha_creacion", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "(NOT activo AND NOT habilitado) OR usuario_id IS NOT NULL",
            name="ck_eolicos_asignado_si_activo",
        ),
    )
    op.create_index("ix_eolicos_codigo", "eolicos", ["codigo"], unique=True)
    op.create_index("ix_eolicos_usuario_id", "eolicos", ["usuario_id"])

    op.create_table(
        "alquileres",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("eolico_id", sa.Integer(), sa.ForeignKey("eolicos.id"), nullable=False),
        sa.Column("usuario_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("estado", sa.String(length=16), nullable=False, server_default="activo"),
        sa.Column("fecha_inicio", sa.DateTime(), nullable=False),
        sa.Column("fecha_fin", sa.DateTime(), nullable=True),
        _money("tarifa_mes", nullable=True),
        _money("costo_instalacion", nullable=True),
        _money("deposito", nullable=True),
        sa.CheckConstraint("estado IN ('activo', 'finalizado')", name="ck_alquileres_estado"),
    )
    op.create_index("ix_alquileres_eolico_id", "alquileres", ["eolico_id"])
    op.create_index("ix_alquileres_usuario_id", "alquileres", ["usuario_id"])
    # Un solo alquiler activo por eólico y por usuario
    op.create_index(
        "uq_alquileres_eolico_activo",
        "alquileres",
        ["eolico_id"],
        unique=True,
        sqlite_where=SOLO_ACTIVOS,
        postgresql_where=SOLO_ACTIVOS,
    )
    op.create_index(
        "uq_alquileres_usuario_activo",
        "alquileres",
        ["usuario_id"],
        unique=True,
        sqlite_where=SOLO_ACTIVOS,
        postgresql_where=SOLO_ACTIVOS,
    )

    op.create_table(
        "cuotas",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "alquiler_id",
            sa.Integer(),
            sa.ForeignKey("alquileres.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("concepto", sa.String(length=20), nullable=False),
        sa.Column("numero", sa.Integer(), nullable=False),
        sa.Column("descripcion", sa.String(length=120), nullable=True),
        sa.Column("fecha_vencimiento", sa.Date(), nullable=False),
        sa.Column("monto", sa.Numeric(12, 2), nullable=False),
        sa.Column("pagado", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("fecha_pago", sa.DateTime(), nullable=True),
        sa.Column("metodo_pago", sa.String(length=40), nullable=True),
        sa.Column("observaciones", sa.String(length=255), nullable=True),
        sa.UniqueConstraint(
            "alquiler_id", "concepto", "numero", name="uq_cuotas_alquiler_concepto_numero"
        ),
        sa.CheckConstraint("monto >= 0", name="ck_cuotas_monto"),
    )
    op.create_index("ix_cuotas_alquiler_id", "cuotas", ["alquiler_id"])

    op.create_table(
        "lecturas_resumen",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("usuario_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("voltaje", sa.Float(), nullable=True),
        sa.Column("bateria", sa.Float(), nullable=True),
        sa.Column("consumo", sa.Float(), nullable=True),
        sa.Column("fecha_lectura", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_lecturas_resumen_usuario_id", "lecturas_resumen", ["usuario_id"])
    op.create_index("ix_lecturas_resumen_fecha_lectura", "lecturas_resumen", ["fecha_lectura"])

    op.create_table(
        "bitacora_accesos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("fecha", sa.DateTime(), nullable=False),
        sa.Column("cuenta_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("usuario_intento", sa.String(length=120), nullable=False),
        sa.Column("ip", sa.String(length=45), nullable=True),
        sa.Column("agente_usuario", sa.String(length=255), nullable=True),
        sa.Column("exito", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("motivo", sa.String(length=40), nullable=False),
    )


def downgrade():
    op.drop_table("bitacora_accesos")
    op.drop_index("ix_lecturas_resumen_fecha_lectura", table_name="lecturas_resumen")
    op.drop_index("ix_lecturas_resumen_usuario_id", table_name="lecturas_resumen")
    op.drop_table("lecturas_resumen")
    op.drop_index("ix_cuotas_alquiler_id", table_name="cuotas")
    op.drop_table("cuotas")
    op.drop_index("uq_alquileres_usuario_activo", table_name="alquileres")
    op.drop_index("uq_alquileres_eolico_activo", table_name="alquileres")
    op.drop_index("ix_alquileres_usuario_id", table_name="alquileres")
    op.drop_index("ix_alquileres_eolico_id", table_name="alquileres")
    op.drop_table("alquileres")
    op.drop_index("ix_eolicos_usuario_id", table_name="eolicos")
    op.drop_index("ix_eolicos_codigo", table_name="eolicos")
    op.drop_table("eolicos")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
