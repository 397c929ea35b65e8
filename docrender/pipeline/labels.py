from __future__ import annotations

from typing import Dict, Optional

from .formatting import language_of


LABELS: Dict[str, Dict[str, str]] = {
    "en": {
        "invoice": "Invoice",
        "invoice_number": "Invoice Number",
        "date": "Date",
        "issue_date": "Issue Date",
        "due_date": "Due Date",
        "currency": "Currency",
        "from": "From",
        "to": "To",
        "description": "Description",
        "quantity": "Qty",
        "rate": "Unit Price",
        "amount": "Total",
        "subtotal": "Subtotal",
        "tax": "Tax",
        "total": "Total",
        "terms": "Terms & Conditions",
        "notes": "Notes",
        "page": "Page",
        "thank_you": "Thank you for your business!",
        "effective_date": "Effective Date",
        "termination_date": "Termination Date",
        "jurisdiction": "Jurisdiction",
        "term_months": "Term (Months)",
        "parties": "Parties",
        "disclosing_party": "Disclosing Party",
        "receiving_party": "Receiving Party",
        "purpose": "Purpose",
        "recitals": "Recitals",
        "recital_text": (
            "WHEREAS, the parties wish to explore potential business opportunities and may need "
            "to disclose confidential information; and WHEREAS, the parties desire to protect such "
            "confidential information from unauthorized disclosure;"
        ),
        "agreement_text": (
            "NOW, THEREFORE, in consideration of the mutual covenants contained herein, "
            "the parties agree as follows:"
        ),
        "signatures": "Signatures",
        "signature": "Signature",
        "print_name": "Print Name",
    },
    "fr": {
        "invoice": "Facture",
        "invoice_number": "Numéro de Facture",
        "date": "Date",
        "issue_date": "Date d'émission",
        "due_date": "Date d'échéance",
        "currency": "Devise",
        "from": "De",
        "to": "À",
        "description": "Description",
        "quantity": "Quantité",
        "rate": "Tarif",
        "amount": "Montant",
        "subtotal": "Sous-total",
        "tax": "TVA",
        "total": "Total",
        "terms": "Conditions Générales",
        "notes": "Notes",
        "page": "Page",
        "thank_you": "Merci pour votre confiance!",
        "effective_date": "Date d'Entrée en Vigueur",
        "termination_date": "Date de Résiliation",
        "jurisdiction": "Juridiction",
        "term_months": "Durée (Mois)",
        "parties": "Parties",
        "disclosing_party": "Partie Divulgatrice",
        "receiving_party": "Partie Réceptrice",
        "purpose": "Objet",
        "signatures": "Signatures",
    },
    "de": {
        "invoice": "Rechnung",
        "invoice_number": "Rechnungsnummer",
        "date": "Datum",
        "due_date": "Fälligkeitsdatum",
        "currency": "Währung",
        "from": "Von",
        "to": "An",
        "description": "Beschreibung",
        "quantity": "Menge",
        "rate": "Preis",
        "amount": "Betrag",
        "subtotal": "Zwischensumme",
        "tax": "MwSt.",
        "total": "Gesamt",
        "terms": "Geschäftsbedingungen",
        "notes": "Notizen",
        "page": "Seite",
        "thank_you": "Vielen Dank für Ihr Vertrauen!",
        "effective_date": "Inkrafttreten",
        "termination_date": "Beendigungsdatum",
        "jurisdiction": "Gerichtsstand",
        "term_months": "Laufzeit (Monate)",
        "disclosing_party": "Offenlegende Partei",
        "receiving_party": "Empfangende Partei",
        "purpose": "Zweck",
        "signatures": "Unterschriften",
    },
    "es": {
        "invoice": "Factura",
        "invoice_number": "Número de Factura",
        "date": "Fecha",
        "due_date": "Fecha de Vencimiento",
        "currency": "Moneda",
        "from": "De",
        "to": "Para",
        "description": "Descripción",
        "quantity": "Cantidad",
        "rate": "Tarifa",
        "amount": "Importe",
        "subtotal": "Subtotal",
        "tax": "IVA",
        "total": "Total",
        "terms": "Términos y Condiciones",
        "notes": "Notas",
        "page": "Página",
        "thank_you": "¡Gracias por su negocio!",
        "effective_date": "Fecha Efectiva",
        "termination_date": "Fecha de Terminación",
        "jurisdiction": "Jurisdicción",
        "term_months": "Plazo (Meses)",
        "disclosing_party": "Parte Reveladora",
        "receiving_party": "Parte Receptora",
        "purpose": "Propósito",
        "signatures": "Firmas",
    },
    "ar": {
        "invoice": "فاتورة",
        "invoice_number": "رقم الفاتورة",
        "date": "التاريخ",
        "due_date": "تاريخ الاستحقاق",
        "currency": "العملة",
        "from": "من",
        "to": "إلى",
        "description": "الوصف",
        "quantity": "الكمية",
        "rate": "السعر",
        "amount": "المبلغ",
        "subtotal": "المجموع الفرعي",
        "tax": "الضريبة",
        "total": "المجموع",
        "terms": "الشروط والأحكام",
        "notes": "ملاحظات",
        "page": "صفحة",
        "thank_you": "شكراً لك على ثقتك!",
        "effective_date": "تاريخ السريان",
        "termination_date": "تاريخ الانتهاء",
        "jurisdiction": "الاختصاص القضائي",
        "term_months": "المدة (بالأشهر)",
        "disclosing_party": "الطرف الكاشف",
        "receiving_party": "الطرف المتلقي",
        "purpose": "الغرض",
        "signatures": "التوقيعات",
    },
    "zh": {
        "invoice": "发票",
        "invoice_number": "发票号码",
        "date": "日期",
        "due_date": "到期日",
        "currency": "货币",
        "from": "发件人",
        "to": "收件人",
        "description": "描述",
        "quantity": "数量",
        "rate": "单价",
        "amount": "金额",
        "subtotal": "小计",
        "tax": "税费",
        "total": "总计",
        "terms": "条款与条件",
        "notes": "备注",
        "page": "页",
        "thank_you": "感谢您的业务！",
        "effective_date": "生效日期",
        "termination_date": "终止日期",
        "jurisdiction": "管辖权",
        "term_months": "期限（月）",
        "disclosing_party": "披露方",
        "receiving_party": "接收方",
        "purpose": "目的",
        "signatures": "签名",
    },
    "ja": {
        "invoice": "請求書",
        "invoice_number": "請求書番号",
        "date": "日付",
        "due_date": "支払期限",
        "currency": "通貨",
        "from": "差出人",
        "to": "宛先",
        "description": "説明",
        "quantity": "数量",
        "rate": "単価",
        "amount": "金額",
        "subtotal": "小計",
        "tax": "税金",
        "total": "合計",
        "terms": "利用規約",
        "notes": "備考",
        "page": "ページ",
        "thank_you": "ありがとうございます！",
        "effective_date": "発効日",
        "termination_date": "終了日",
        "jurisdiction": "管轄",
        "term_months": "期間（月）",
        "disclosing_party": "開示者",
        "receiving_party": "受領者",
        "purpose": "目的",
        "signatures": "署名",
    },
}


class Labels:
    """Per-locale document labels; keys missing for a language fall back to English."""

    def __init__(self, locale: str) -> None:
        self.locale = locale
        self._table = LABELS.get(language_of(locale), LABELS["en"])

    def __getitem__(self, key: str) -> str:
        return self._table.get(key) or LABELS["en"][key]

    def get(self, key: str) -> Optional[str]:
        """Label in this locale's own language only, without English fallback."""
        return self._table.get(key)


def labels_for(locale: str) -> Labels:
    return Labels(locale)
