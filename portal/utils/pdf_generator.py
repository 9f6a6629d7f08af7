from fpdf import FPDF
from fpdf.enums import XPos, YPos

from portal.utils.dates import utcnow

NEXT_LINE = {"new_x": XPos.LMARGIN, "new_y": YPos.NEXT}


class PDFVoucher(FPDF):
    def header(self):
        self.set_font("Helvetica", "B", 18)
        self.set_text_color(33, 37, 41)  # Gris oscuro
        self.cell(0, 10, "KECHITA", **NEXT_LINE)

        self.set_font("Helvetica", "", 10)
        self.set_text_color(108, 117, 125)
        self.cell(0, 5, "Petty Cash Payment Voucher", **NEXT_LINE)
        self.ln(3)

        self.set_draw_color(200, 200, 200)
        self.line(10, 32, 200, 32)
        self.ln(8)

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(128)
        self.cell(0, 10, f"Generated {utcnow():%d/%m/%Y %H:%M} UTC - Page {self.page_no()}", align="C")


def _row(pdf: FPDF, label: str, value: str):
    pdf.set_font("Helvetica", "B", 10)
    pdf.cell(45, 7, label)
    pdf.set_font("Helvetica", "", 10)
    # Fuentes core: solo latin-1
    pdf.cell(0, 7, value.encode("latin-1", "replace").decode("latin-1"), **NEXT_LINE)


def generate_voucher_pdf(transaction) -> bytes:
    pdf = PDFVoucher()
    pdf.add_page()
    pdf.set_auto_page_break(auto=True, margin=15)

    # --- ENCABEZADO ---
    pdf.set_font("Helvetica", "B", 14)
    pdf.set_text_color(0, 0, 0)
    pdf.cell(120, 10, f"VOUCHER {transaction.voucher_number}")
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(70, 10, f"Date: {transaction.transaction_date:%d/%m/%Y}", align="R", **NEXT_LINE)
    pdf.ln(4)

    # --- DETALLE ---
    requester = transaction.requested_by
    branch = transaction.branch
    category = transaction.category

    _row(pdf, "Branch:", branch.name if branch else str(transaction.branch_id))
    _row(pdf, "Category:", f"{category.code} - {category.name}" if category else "-")
    _row(pdf, "Requested by:", (requester.full_name or requester.email) if requester else "-")
    _row(pdf, "Description:", (transaction.description or "-")[:90])
    _row(pdf, "Status:", transaction.status.value)

    # --- MONTO ---
    pdf.ln(6)
    pdf.set_font("Helvetica", "B", 12)
    pdf.set_fill_color(240, 240, 240)
    pdf.cell(140, 10, "AMOUNT", align="R", fill=True)
    pdf.cell(50, 10, f"{transaction.amount:,.2f}", align="R", fill=True, **NEXT_LINE)

    # --- FIRMAS ---
    pdf.ln(25)
    pdf.set_font("Helvetica", "", 9)
    signatures = ("Received by", "Supervisor", "Finance")
    for _ in signatures:
        pdf.cell(63, 5, "_" * 28, align="C")
    pdf.ln(5)
    for label in signatures:
        pdf.cell(63, 5, label, align="C")

    return bytes(pdf.output())
