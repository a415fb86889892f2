"""
app.py
Streamlit operator console for the study room (single admin, PIN login).
Run: streamlit run app.py
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date

import pandas as pd
import streamlit as st

import auth
import backup
import dashboard
import db
import desks
import ledger
import messaging
import notifications
import store
import students
import subscriptions
import sync
from config import get_config
from errors import StudyRoomError
from models import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    Channel,
    Direction,
    PaymentStatus,
    SubscriptionType,
    Transaction,
    TransactionType,
)
from observability import setup_logging
from store import Collection
from utils import format_amount, new_id, now_utc, parse_day, to_iso, today

st.set_page_config(page_title="Demir Hocam Çalışma Salonu", layout="wide")


def init_once():
    config = get_config()
    setup_logging(config.log_level, config.log_format)
    db.init_db()


def require_login():
    if "logged_in" not in st.session_state:
        st.session_state.logged_in = False


def logout():
    st.session_state.logged_in = False
    st.success("Çıkış yapıldı.")


def login_screen():
    st.title("🔐 Demir Hocam")
    st.caption("Çalışma Salonu Yönetim Sistemi")

    pin = st.text_input("Admin PIN", type="password")
    if st.button("Giriş Yap", type="primary"):
        if auth.verify_pin(pin, store.load_settings()):
            st.session_state.logged_in = True
            st.rerun()
        else:
            st.error("Hatalı PIN")


def student_table(rows) -> pd.DataFrame:
    day = today()
    data = [
        {
            "id": s.id,
            "Ad Soyad": s.full_name,
            "Telefon": s.student_phone,
            "Abonelik": s.subscription_type.value,
            "Masa": s.desk_number,
            "Durum": s.payment_status.value,
            "Sonraki Ödeme": (parse_day(s.next_payment_date) or "-"),
            "Kalan Gün": subscriptions.remaining_days(s, day),
        }
        for s in rows
    ]
    return pd.DataFrame(data, columns=["id", "Ad Soyad", "Telefon", "Abonelik", "Masa", "Durum", "Sonraki Ödeme", "Kalan Gün"])


def sidebar_notifications():
    items = store.load(Collection.NOTIFICATIONS)
    unread = notifications.unread_count(items)
    with st.sidebar.expander(f"🔔 Bildirimler ({unread})"):
        for n in notifications.recent(10):
            st.write(f"**{n.title}** · {n.message}")
        if unread and st.button("Tümünü okundu işaretle"):
            notifications.mark_all_read()
            st.rerun()


def dashboard_page():
    st.header("📊 Genel Bakış")

    all_students = store.load(Collection.STUDENTS)
    stats = dashboard.dashboard_stats(all_students, store.load(Collection.TRANSACTIONS), today())

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Toplam öğrenci", stats["total_students"])
    c2.metric("Boş masa", stats["empty_desks"])
    c3.metric("Gecikmiş ödeme", stats["overdue_payments"])
    c4.metric("Bu ay gelir", f"{format_amount(stats['monthly_revenue'])} ₺")

    st.caption(f"Aylık abonelik: {stats['monthly_subs']} | Yıllık abonelik: {stats['yearly_subs']}")

    if st.button("Ödemeleri kontrol et"):
        count = subscriptions.run_overdue_check()
        st.info(f"{count} öğrenci gecikmiş duruma alındı.")
        st.rerun()

    st.divider()
    st.subheader("🎂 Bugün doğum günü olanlar")
    if stats["birthdays"]:
        for s in stats["birthdays"]:
            st.write(f"- {s.full_name} ({s.student_phone})")
    else:
        st.caption("Bugün doğum günü olan öğrenci yok.")

    st.subheader("⏰ Ödemesi yaklaşanlar")
    urgent = [s for s in all_students if subscriptions.is_urgent(s, today())]
    if urgent:
        st.dataframe(student_table(urgent), use_container_width=True, hide_index=True)
    else:
        st.caption("Acil ödeme yok.")


def desks_page():
    st.header("🪑 Masa Düzeni")

    all_students = store.load(Collection.STUDENTS)
    taken = desks.occupancy(all_students)

    columns = st.columns(len(desks.DESK_LAYOUT))
    for col, numbers in zip(columns, desks.DESK_LAYOUT.values()):
        with col:
            for n in numbers:
                s = taken.get(n)
                st.write(f"**{n}** · {s.full_name} ({s.subscription_type.value})" if s else f"**{n}** · boş")

    st.divider()
    desk = st.selectbox("Masa", desks.DESK_NUMBERS)
    holder = taken.get(desk)
    if holder:
        st.write(f"Masada: **{holder.full_name}**")
        if st.button("Masayı boşalt"):
            desks.release_desk(holder.id)
            st.rerun()
    else:
        waiting = desks.unassigned_students(all_students)
        if not waiting:
            st.caption("Masası olmayan öğrenci yok.")
            return
        options = {f"{s.full_name} ({s.student_phone})": s.id for s in waiting}
        label = st.selectbox("Öğrenci", list(options.keys()))
        if st.button("Masaya yerleştir", type="primary"):
            try:
                desks.assign_desk(options[label], desk)
                st.rerun()
            except StudyRoomError as e:
                st.error(e.message)


def student_form(existing=None):
    st.subheader("✏️ Öğrenci Düzenle" if existing else "➕ Yeni Öğrenci")

    col1, col2 = st.columns(2)
    with col1:
        full_name = st.text_input("Ad soyad", value=existing.full_name if existing else "")
        parent_name = st.text_input("Veli adı", value=existing.parent_name if existing else "")
        student_phone = st.text_input("Öğrenci telefonu", value=existing.student_phone if existing else "")
        parent_phone = st.text_input("Veli telefonu", value=existing.parent_phone if existing else "")
    with col2:
        email = st.text_input("E-posta", value=(existing.email or "") if existing else "")
        dob = st.date_input(
            "Doğum tarihi",
            value=(parse_day(existing.dob) if existing and parse_day(existing.dob) else date(2008, 1, 1)),
        ).isoformat()
        sub_values = [t.value for t in SubscriptionType]
        sub = st.selectbox(
            "Abonelik", sub_values,
            index=sub_values.index(existing.subscription_type.value) if existing else 0,
        )
        notes = st.text_area("Notlar", value=(existing.notes or "") if existing else "")

    errors = students.validate_student_inputs(full_name, student_phone, parent_phone, email, dob)
    for e in errors:
        st.error(e)

    if existing:
        status_values = [p.value for p in PaymentStatus]
        status = st.selectbox("Ödeme durumu", status_values, index=status_values.index(existing.payment_status.value))
        if st.button("Kaydet", type="primary", disabled=bool(errors)):
            students.update_student(replace(
                existing,
                full_name=full_name.strip(),
                parent_name=parent_name.strip(),
                student_phone=student_phone.strip(),
                parent_phone=parent_phone.strip(),
                email=email.strip() or None,
                dob=dob,
                subscription_type=SubscriptionType(sub),
                payment_status=PaymentStatus(status),
                notes=notes.strip() or None,
            ))
            st.session_state.edit_student_id = None
            st.rerun()
    else:
        accepted = st.checkbox("Kayıt sözleşmesi okundu ve onaylandı")
        if st.button("Kaydet", type="primary", disabled=bool(errors)):
            created = students.register_student(
                full_name, parent_name, student_phone, parent_phone,
                subscription_type=SubscriptionType(sub), contract_accepted=accepted,
                email=email, dob=dob, notes=notes,
            )
            if created:
                st.success(f"{created.full_name} sisteme eklendi.")
                st.rerun()
            else:
                st.warning("Lütfen öğrenci kayıt sözleşmesini onaylayın.")


def students_page():
    st.header("👥 Öğrenciler")

    all_students = store.load(Collection.STUDENTS)
    search = st.sidebar.text_input("Ara (ad/telefon)")
    rows = students.search_students(all_students, search)
    st.dataframe(student_table(rows), use_container_width=True, hide_index=True)

    st.divider()
    options = {f"{s.full_name} ({s.student_phone})": s.id for s in rows}
    label = st.selectbox("Öğrenci seç", ["(yok)"] + list(options.keys()))

    if label != "(yok)":
        student = students.find_student(all_students, options[label])
        settings = store.load_settings()
        price = subscriptions.price_for(student.subscription_type, settings.pricing)

        c1, c2, c3 = st.columns(3)
        with c1:
            if st.button(f"Ödeme al ({format_amount(price)} ₺)", type="primary"):
                subscriptions.record_payment(student, settings)
                st.rerun()
        with c2:
            if st.button("Düzenle"):
                st.session_state.edit_student_id = student.id
                st.rerun()
        with c3:
            confirm = st.checkbox("Silmeyi onayla", value=False)
            if st.button("Sil", disabled=not confirm):
                students.delete_student(student.id)
                st.rerun()

        with st.expander("✉️ Mesaj gönder"):
            channel = st.radio("Kanal", [Channel.SMS.value, Channel.EMAIL.value], horizontal=True)
            subject = st.text_input("Konu", value=f"{student.full_name} - Bilgilendirme")
            body = st.text_area("Mesaj")
            target = student.email if channel == Channel.EMAIL.value else student.student_phone
            if st.button("Gönder"):
                ok = messaging.send(target or "", subject, body, channel, settings, student_id=student.id)
                if ok and channel == Channel.EMAIL.value:
                    st.link_button("E-posta programını aç", messaging.mailto_link(target, subject, body))
                elif ok:
                    st.success("SMS gönderildi.")
                else:
                    st.error("Mesaj gönderilemedi, bildirimlere bakınız.")

    st.divider()
    editing = st.session_state.get("edit_student_id")
    existing = students.find_student(all_students, editing) if editing else None
    if existing:
        student_form(existing)
        if st.button("Düzenlemeyi iptal et"):
            st.session_state.edit_student_id = None
            st.rerun()
    else:
        student_form(None)


def finance_page():
    st.header("💰 Finansal Durum")

    transactions = store.load(Collection.TRANSACTIONS)
    summary = ledger.summary(transactions)
    c1, c2, c3 = st.columns(3)
    c1.metric("Toplam gelir", f"{format_amount(summary['income'])} ₺")
    c2.metric("Toplam gider", f"{format_amount(summary['expense'])} ₺")
    c3.metric("Net bakiye", f"{format_amount(summary['balance'])} ₺")

    monthly = ledger.by_month(transactions)
    if not monthly.empty:
        st.bar_chart(monthly.set_index("month"))
    st.dataframe(ledger.by_category(transactions), use_container_width=True, hide_index=True)

    st.subheader("Son işlemler")
    recent = ledger.recent(transactions, 20)
    st.dataframe(ledger.to_frame(recent), use_container_width=True, hide_index=True)

    st.subheader("İşlem ekle")
    c1, c2, c3 = st.columns(3)
    with c1:
        kind = st.selectbox("Tür", [TransactionType.INCOME.value, TransactionType.EXPENSE.value])
    with c2:
        cats = INCOME_CATEGORIES if kind == TransactionType.INCOME.value else EXPENSE_CATEGORIES
        category = st.selectbox("Kategori", [c.value for c in cats])
    with c3:
        amount = st.text_input("Tutar", value="0")
    description = st.text_input("Açıklama")
    if st.button("Kaydet", type="primary"):
        try:
            ledger.append(Transaction(
                id=new_id(),
                date=to_iso(now_utc()),
                amount=float(amount),
                type=TransactionType(kind),
                category=next(c for c in cats if c.value == category),
                description=description,
            ))
            st.success("İşlem kaydedildi.")
            st.rerun()
        except ValueError:
            st.error("Tutar sayısal olmalıdır.")
        except StudyRoomError as e:
            st.error(e.message)

    if transactions:
        st.download_button("İşlemleri indir (CSV)", data=ledger.transactions_to_csv_bytes(transactions),
                           file_name="islemler.csv", mime="text/csv")


def messages_page():
    st.header("📨 Mesajlar")

    box = st.radio("Kutu", ["Giden Kutusu", "Gelen Kutusu"], horizontal=True)
    direction = Direction.OUTBOUND if box == "Giden Kutusu" else Direction.INBOUND
    search = st.text_input("Ara")
    rows = messaging.inbox(store.load(Collection.MESSAGES), direction, search)
    if not rows:
        st.caption("Mesaj yok.")
        return
    st.dataframe(
        pd.DataFrame([
            {"Tarih": m.date, "Alıcı": m.recipient, "Kanal": m.channel.value, "Konu": m.subject or "", "Mesaj": m.body}
            for m in rows
        ]),
        use_container_width=True,
        hide_index=True,
    )


def settings_page():
    st.header("⚙️ Ayarlar")
    settings = store.load_settings()

    st.subheader("Fiyatlandırma")
    c1, c2, c3 = st.columns(3)
    monthly = c1.number_input("Aylık", value=float(settings.pricing.monthly_price), min_value=0.0)
    yearly = c2.number_input("Yıllık", value=float(settings.pricing.yearly_price), min_value=0.0)
    trial = c3.number_input("Deneme", value=float(settings.pricing.trial_price), min_value=0.0)

    st.subheader("NetGSM")
    g1, g2, g3 = st.columns(3)
    username = g1.text_input("Kullanıcı adı", value=settings.netgsm.username)
    password = g2.text_input("Şifre", value=settings.netgsm.password, type="password")
    header = g3.text_input("Başlık", value=settings.netgsm.header)

    if st.button("Ayarları kaydet", type="primary"):
        updated = settings.with_pricing(monthly_price=monthly, yearly_price=yearly, trial_price=trial)
        updated = replace(updated, netgsm=replace(updated.netgsm, username=username, password=password, header=header))
        store.save_settings(updated)
        st.success("Ayarlar kaydedildi.")

    st.subheader("PIN değiştir")
    p1 = st.text_input("Yeni PIN", type="password")
    p2 = st.text_input("Yeni PIN (tekrar)", type="password")
    if st.button("PIN güncelle"):
        if p1 != p2:
            st.error("PIN'ler eşleşmiyor.")
        else:
            try:
                store.save_settings(auth.change_pin(store.load_settings(), p1))
                st.success("PIN güncellendi.")
            except StudyRoomError as e:
                st.error(e.message)

    st.divider()
    st.subheader("Yedekleme")
    st.download_button("Yedek indir", data=backup.export_json(), file_name=backup.backup_filename(),
                       mime="application/json")
    uploaded = st.file_uploader("Yedek yükle", type=["json"])
    if uploaded is not None and st.button("Yedeği geri yükle"):
        result = backup.restore_json(uploaded.getvalue())
        (st.success if result.success else st.error)(result.message)

    st.subheader("Cihazlar arası aktarım (QR)")
    payload = sync.build_payload(store.load(Collection.STUDENTS))
    st.code(payload, language="json")
    scanned = st.text_area("Taranan QR verisi")
    if st.button("Verileri birleştir") and scanned.strip():
        result = sync.merge_payload(scanned)
        (st.success if result.success else st.error)(result.message)

    st.subheader("Örnek veri")
    if st.button("Örnek veri ekle"):
        students.insert_sample_data()
        st.success("Örnek veri eklendi.")
        st.rerun()


def main_app():
    st.sidebar.title("📚 Demir Hocam")
    sidebar_notifications()

    pages = ["Genel Bakış", "Masalar", "Öğrenciler", "Finans", "Mesajlar", "Ayarlar"]
    if "page" not in st.session_state:
        st.session_state.page = "Genel Bakış"
    st.session_state.page = st.sidebar.radio("Menü", pages, index=pages.index(st.session_state.page))

    if st.sidebar.button("Çıkış"):
        logout()
        st.rerun()

    if st.session_state.page == "Genel Bakış":
        dashboard_page()
    elif st.session_state.page == "Masalar":
        desks_page()
    elif st.session_state.page == "Öğrenciler":
        students_page()
    elif st.session_state.page == "Finans":
        finance_page()
    elif st.session_state.page == "Mesajlar":
        messages_page()
    elif st.session_state.page == "Ayarlar":
        settings_page()


# --------- App entry ---------

def run():
    init_once()
    require_login()

    if not st.session_state.logged_in:
        login_screen()
        return

    main_app()


if __name__ == "__main__":
    run()
