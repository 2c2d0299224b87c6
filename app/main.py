"""
Streamlit Frontend for LavaFix

The dashboard the shop owner uses every day: who owes this month,
who paid, the payment history and what changed.

DESIGN PRINCIPLES:
1. Every number on screen is recomputed from the ledger on each run
2. Destructive actions show a preview and need an explicit second click
3. Clear messages in simple Spanish
4. No hidden actions
"""

import base64
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import streamlit as st

from lavafix.agents import ChatMessage
from lavafix.export import BackupExportError, FileBackupSink
from lavafix.ledger import (
    HistoryFilter,
    SortKey,
    SortState,
    filter_payments,
    payment_years,
    pending_clients,
    summarize,
    visible_clients,
)
from lavafix.messaging import build_whatsapp_link, first_pending_reminder
from lavafix.models import (
    Client,
    ClientDraft,
    ClientPatch,
    ClientStatus,
    NotificationType,
    PaymentPatch,
    format_amount,
)
from lavafix.orchestrator import AppComponents, create_app_components
from lavafix.services.storage import MAX_CELL_CHARS


# Page configuration
st.set_page_config(
    page_title="LavaFix",
    page_icon="🧺",
    layout="wide",
    initial_sidebar_state="expanded",
)

MONTHS = [
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
]

NOTIFICATION_ICONS = {
    NotificationType.INFO: "ℹ️",
    NotificationType.SUCCESS: "✅",
    NotificationType.WARNING: "⚠️",
}


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    return create_app_components()


def money(amount: Decimal, components: AppComponents) -> str:
    return format_amount(amount, components.store.settings.currency_symbol)


def image_to_data_url(uploaded) -> Optional[str]:
    if uploaded is None:
        return None
    encoded = base64.b64encode(uploaded.getvalue()).decode("ascii")
    return f"data:{uploaded.type};base64,{encoded}"


def ask_confirmation(action: str, target_id: Optional[str] = None) -> None:
    st.session_state.pending_action = (action, target_id)
    st.rerun()


def clear_confirmation() -> None:
    st.session_state.pending_action = None
    st.rerun()


def render_stats(components: AppComponents):
    """Top stat cards. total income is all-time, never filtered."""
    store = components.store
    summary = summarize(store.clients, store.payments)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Clientes", summary.total_clients)
    col2.metric("Ingresos totales", money(summary.total_income, components))
    col3.metric("Por cobrar", money(summary.pending_total, components))
    col4.metric("Pendientes", summary.pending_count)


def render_confirmation(components: AppComponents):
    """Second step of every destructive action."""
    action, target_id = st.session_state.pending_action
    store, billing = components.store, components.billing

    if action == "delete_client":
        preview = store.preview_delete_client(target_id)
        if preview is None:
            clear_confirmation()
        st.warning(
            f"Advertencia: **{preview.client.name}** se borrará definitivamente "
            f"por completo, junto con {preview.payment_count} registro(s) de pago. "
            "¿Desea continuar?"
        )
        commit = lambda: store.delete_client(target_id)
    elif action == "undo_payment":
        preview = billing.preview_undo_payment(target_id)
        if preview is None:
            clear_confirmation()
        detail = (
            f"Eliminará el pago del {preview.payment_to_remove.date:%d/%m/%Y} "
            f"por {money(preview.payment_to_remove.amount, components)}."
            if preview.removes_payment
            else "No hay pagos registrados para eliminar."
        )
        st.warning(
            f"¿Desea corregir el estado de **{preview.client.name}**? "
            f"Pasará a PENDIENTE. {detail}"
        )
        commit = lambda: billing.undo_payment(target_id)
    elif action == "reset_month":
        preview = billing.preview_reset_month()
        st.warning(
            f"¿Reiniciar mes? Los {preview.total_count} clientes pasarán a estado "
            f"Pendiente ({preview.changed_count} estaban pagados)."
        )
        commit = billing.reset_month
    elif action == "delete_payment":
        payment = store.preview_delete_payment(target_id)
        if payment is None:
            clear_confirmation()
        st.warning(
            f"¿Eliminar permanentemente el pago de **{payment.client_name}** "
            f"({money(payment.amount, components)}) del historial?"
        )
        commit = lambda: store.delete_payment(target_id)
    else:
        clear_confirmation()
        return

    col1, col2 = st.columns(2)
    with col1:
        if st.button("✅ Confirmar", type="primary"):
            commit()
            clear_confirmation()
    with col2:
        if st.button("❌ Cancelar"):
            clear_confirmation()


def render_client_form(components: AppComponents, client: Optional[Client] = None):
    """Add form (client=None) or edit form."""
    store = components.store
    key = client.id if client else "new"

    with st.form(f"client_form_{key}", clear_on_submit=client is None):
        name = st.text_input("Nombre", value=client.name if client else "", key=f"name_{key}")
        col1, col2 = st.columns(2)
        phone1 = col1.text_input("Teléfono 1", value=client.phone1 if client else "", key=f"phone1_{key}")
        phone2 = col2.text_input(
            "Teléfono 2",
            value=(client.phone2 or "") if client else "",
            key=f"phone2_{key}",
        )
        monthly_amount = st.number_input(
            "Cuota mensual",
            min_value=0.0,
            step=10.0,
            value=float(
                client.monthly_amount if client
                else store.settings.default_monthly_amount
            ),
            key=f"amount_{key}",
        )
        photo = st.file_uploader("Foto", type=["png", "jpg", "jpeg", "webp"], key=f"photo_{key}")
        submitted = st.form_submit_button("💾 Guardar")

    if not submitted:
        return

    amount = Decimal(str(monthly_amount))
    image = image_to_data_url(photo)
    if (
        image
        and store.settings.storage_backend == "sheets"
        and len(image) > MAX_CELL_CHARS
    ):
        st.error("La foto es demasiado grande para guardarse en Google Sheets.")
        return
    if client is None:
        saved = store.add_client(
            ClientDraft(
                name=name,
                phone1=phone1,
                phone2=phone2 or None,
                monthly_amount=amount,
                image=image,
            )
        )
    else:
        changes = {
            "name": name,
            "phone1": phone1,
            "phone2": phone2 or None,
            "monthly_amount": amount,
        }
        if image:
            changes["image"] = image
        saved = store.update_client(client.id, ClientPatch(**changes))

    if saved is None:
        st.error("El nombre y el teléfono 1 son obligatorios.")
    else:
        st.rerun()


def render_client_row(components: AppComponents, client: Client, pending_view: bool):
    store, billing = components.store, components.billing

    with st.container(border=True):
        col_img, col_info, col_amount, col_actions = st.columns([1, 4, 2, 3])
        if client.image:
            col_img.image(client.image, width=48)
        else:
            col_img.markdown("👤")

        phones = client.phone1 + (f" · {client.phone2}" if client.phone2 else "")
        badge = "🟢" if client.status == ClientStatus.PAGADO else "🟠"
        col_info.markdown(f"**{client.name}**  \n{phones}  \n{badge} {client.status.value}")
        col_amount.markdown(f"**{money(client.monthly_amount, components)}**")

        with col_actions:
            if client.status == ClientStatus.PENDIENTE:
                notes = st.text_input("Notas", key=f"notes_{client.id}")
                if st.button("💵 Registrar pago", key=f"pay_{client.id}"):
                    billing.record_payment(client.id, notes)
                    st.rerun()
                if pending_view:
                    link = build_whatsapp_link(client, store.settings)
                    st.link_button("📲 Recordatorio", link.url)
            else:
                if st.button("↩️ Corregir estado", key=f"undo_{client.id}"):
                    ask_confirmation("undo_payment", client.id)

            if not pending_view:
                if st.button("🗑️ Eliminar", key=f"delete_{client.id}"):
                    ask_confirmation("delete_client", client.id)

        if not pending_view:
            with st.expander("✏️ Editar"):
                render_client_form(components, client)


def render_clients_page(components: AppComponents):
    """All clients: search, sort, add."""
    store = components.store
    if "sort_state" not in st.session_state:
        st.session_state.sort_state = SortState()

    with st.expander("➕ Nuevo cliente"):
        render_client_form(components)

    col_search, col_name, col_status, col_reset = st.columns([4, 1, 1, 2])
    term = col_search.text_input("Buscar por nombre o teléfono")
    if col_name.button("Nombre ↕"):
        st.session_state.sort_state = st.session_state.sort_state.select(SortKey.NAME)
    if col_status.button("Estado ↕"):
        st.session_state.sort_state = st.session_state.sort_state.select(SortKey.STATUS)
    if col_reset.button("🔄 Reiniciar mes"):
        ask_confirmation("reset_month")

    clients = visible_clients(store.clients, term, st.session_state.sort_state)
    if not clients:
        st.info("No hay clientes.")
    for client in clients:
        render_client_row(components, client, pending_view=False)


def render_pending_page(components: AppComponents):
    """Clients that still owe this month, with reminders."""
    store = components.store
    pending = pending_clients(store.clients)

    if st.button("📣 Enviar recordatorio a todos"):
        link = first_pending_reminder(store.clients, store.settings)
        if link is None:
            st.info("No hay clientes pendientes.")
        else:
            st.write(
                f"Se enviará un recordatorio a {len(pending)} clientes. "
                "Por restricciones del navegador se abre WhatsApp para el primero; "
                "continúe manualmente con los demás."
            )
            st.link_button("Abrir WhatsApp", link.url)

    if not pending:
        st.success("¡Todos los clientes están al día!")
    for client in pending:
        render_client_row(components, client, pending_view=True)


def render_history_page(components: AppComponents):
    """Payment history with filters, edit, delete and CSV backup."""
    store, exporter = components.store, components.exporter

    col1, col2, col3 = st.columns([3, 1, 1])
    search = col1.text_input("Buscar cliente")
    years = ["Todos"] + [str(y) for y in payment_years(store.payments)]
    year = col2.selectbox("Año", years)
    month = col3.selectbox("Mes", ["Todos"] + MONTHS)

    history_filter = HistoryFilter(
        search=search,
        year=None if year == "Todos" else int(year),
        month=None if month == "Todos" else MONTHS.index(month) + 1,
    )
    payments = filter_payments(store.payments, history_filter)

    backup = exporter.build(store.payments, date.today())
    col_dl, col_save = st.columns(2)
    col_dl.download_button(
        "⬇️ Descargar respaldo",
        data=backup.data,
        file_name=backup.filename,
        mime="text/csv",
    )
    if col_save.button("💾 Guardar respaldo en el servidor"):
        try:
            location = exporter.export(store.payments, FileBackupSink(store.settings.backup_dir))
            st.success(f"Respaldo guardado en {location}")
        except BackupExportError as e:
            st.error(f"No se pudo guardar el respaldo: {e}")

    if not payments:
        st.info("No hay pagos que coincidan.")
    for payment in payments:
        with st.container(border=True):
            col_info, col_amount, col_delete = st.columns([5, 2, 1])
            col_info.markdown(
                f"**{payment.client_name}**  \n{payment.date:%d/%m/%Y %H:%M}"
                + (f"  \n_{payment.notes}_" if payment.notes else "")
            )
            col_amount.markdown(f"**{money(payment.amount, components)}**")
            if col_delete.button("🗑️", key=f"delete_payment_{payment.id}"):
                ask_confirmation("delete_payment", payment.id)

            with st.expander("✏️ Editar registro"):
                with st.form(f"payment_form_{payment.id}"):
                    paid_on = st.date_input("Fecha", value=payment.date.date(), key=f"payment_date_{payment.id}")
                    amount = st.number_input(
                        "Monto",
                        min_value=0.0,
                        value=float(payment.amount),
                        key=f"payment_amount_{payment.id}",
                    )
                    notes = st.text_input(
                        "Notas", value=payment.notes or "", key=f"payment_notes_{payment.id}"
                    )
                    if st.form_submit_button("💾 Guardar"):
                        store.update_payment(
                            payment.id,
                            PaymentPatch(
                                date=datetime.combine(paid_on, payment.date.time()),
                                amount=Decimal(str(amount)),
                                notes=notes or None,
                            ),
                        )
                        st.rerun()


def render_notifications_page(components: AppComponents):
    notifications = components.store.notifications
    if not notifications:
        st.info("Sin notificaciones.")
    for notification in notifications:
        icon = NOTIFICATION_ICONS[notification.type]
        st.markdown(
            f"{icon} **{notification.title}** · {notification.timestamp:%d/%m/%Y %H:%M}  \n"
            f"{notification.message}"
        )


def render_assistant_page(components: AppComponents):
    """Chat with the service assistant."""
    if components.assistant is None:
        st.warning("El asistente no está configurado (falta GEMINI_API_KEY).")
        return

    if "chat_messages" not in st.session_state:
        st.session_state.chat_messages = []

    for message in st.session_state.chat_messages:
        with st.chat_message("user" if message.role == "user" else "assistant"):
            st.markdown(message.text)

    prompt = st.chat_input("Describe el problema (ej. Lavadora hace ruido metálico)")
    if prompt:
        with st.spinner("Pensando..."):
            reply = components.assistant.ask(st.session_state.chat_messages, prompt)
        st.session_state.chat_messages.append(ChatMessage(role="user", text=prompt))
        st.session_state.chat_messages.append(ChatMessage(role="model", text=reply.text))
        st.rerun()


def main():
    """Main application entry point."""
    components = get_components()

    st.sidebar.title(f"🧺 {components.store.settings.app_name}")
    st.sidebar.markdown("---")
    page = st.sidebar.radio(
        "Ir a:",
        [
            "👥 Clientes",
            "⏳ Pendientes",
            "📜 Historial de Pagos",
            "🔔 Notificaciones",
            "💬 Asistente",
        ],
        index=0,
    )

    if "pending_action" not in st.session_state:
        st.session_state.pending_action = None

    render_stats(components)
    st.markdown("---")

    if st.session_state.pending_action:
        render_confirmation(components)
        return

    if page == "👥 Clientes":
        render_clients_page(components)
    elif page == "⏳ Pendientes":
        render_pending_page(components)
    elif page == "📜 Historial de Pagos":
        render_history_page(components)
    elif page == "🔔 Notificaciones":
        render_notifications_page(components)
    elif page == "💬 Asistente":
        render_assistant_page(components)


if __name__ == "__main__":
    main()
