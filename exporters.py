"""
Export module: PDF and CSV compliance reports for a ComplianceDocument,
generated locally without any external API or AI.
"""

import io
import csv
from datetime import datetime
from xml.sax.saxutils import escape

from models import ComplianceDocument


# ─────────────────────────────────────────────────────────────────────────────
# Shared helpers
# ─────────────────────────────────────────────────────────────────────────────

RISK_COLOR = {
    "low":      ( 76, 175, 132),   # green
    "medium":   (244, 200,  66),   # yellow
    "high":     (255, 140,  66),   # orange
    "critical": (220,  53,  69),   # red
}

GOLD    = (212, 175,  55)
DARK    = ( 13,  13,  13)
GREY    = (100, 100, 100)
LGREY   = (220, 220, 220)

STATUS_LABEL = {
    "PENDING_REVIEW":  "Pending review",
    "IN_REVIEW":       "In review",
    "REVISION_NEEDED": "Revision needed",
    "APPROVED":        "Approved",
    "REJECTED":        "Rejected",
}

def _now() -> str:
    return datetime.now().strftime("%B %d, %Y at %H:%M")

def _fmt_ts(ts) -> str:
    return ts.strftime("%Y-%m-%d %H:%M UTC") if ts else ""

def _regs(doc: ComplianceDocument) -> str:
    return ", ".join(doc.regulations)


# ─────────────────────────────────────────────────────────────────────────────
# PDF report  (ReportLab)
# ─────────────────────────────────────────────────────────────────────────────

def export_pdf(doc: ComplianceDocument) -> bytes:
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
    from reportlab.lib.units import mm
    from reportlab.lib import colors
    from reportlab.platypus import (
        SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle,
        HRFlowable, KeepTogether
    )

    buf = io.BytesIO()
    pdf = SimpleDocTemplate(
        buf, pagesize=A4,
        leftMargin=20*mm, rightMargin=20*mm,
        topMargin=18*mm, bottomMargin=18*mm,
        title="Compliance Report"
    )

    W, H = A4
    cw = W - 40*mm  # content width

    def rgb(t):  return colors.Color(*[v/255 for v in t])

    rc      = rgb(RISK_COLOR.get(doc.risk_level, GREY))
    gold_c  = rgb(GOLD)
    dark_c  = rgb(DARK)
    grey_c  = rgb(GREY)
    lgrey_c = rgb(LGREY)

    base = getSampleStyleSheet()

    def sty(name, parent="Normal", **kw):
        return ParagraphStyle(name, parent=base[parent], **kw)

    s_title = sty("title", fontSize=20, leading=26, textColor=dark_c, spaceAfter=4, fontName="Helvetica-Bold")
    s_h2    = sty("h2",    fontSize=13, leading=18, textColor=dark_c, spaceBefore=14, spaceAfter=6, fontName="Helvetica-Bold")
    s_body  = sty("body",  fontSize=9,  leading=14, textColor=dark_c, spaceAfter=4)
    s_small = sty("small", fontSize=8,  leading=12, textColor=grey_c, spaceAfter=2)

    story = []

    # ── Header ──────────────────────────────────────────────────────────────
    header_tbl = Table([[
        Paragraph("Compliance Assessment Report", s_title),
        Paragraph(f"Generated {_now()}", s_small),
    ]], colWidths=[cw*0.75, cw*0.25])
    header_tbl.setStyle(TableStyle([
        ("VALIGN",        (0,0), (-1,-1), "BOTTOM"),
        ("ALIGN",         (1,0), (1,0),   "RIGHT"),
        ("BOTTOMPADDING", (0,0), (-1,-1), 8),
    ]))
    story.append(header_tbl)
    story.append(HRFlowable(width="100%", thickness=2, color=gold_c, spaceAfter=12))

    # ── Document metadata ───────────────────────────────────────────────────
    meta = [
        ["Document",    escape(doc.document_name)],
        ["Type",        doc.document_type],
        ["Regulations", escape(_regs(doc))],
        ["Status",      STATUS_LABEL.get(doc.status, doc.status)],
        ["Reviewed",    _fmt_ts(doc.reviewed_at) or "Not yet reviewed"],
    ]
    mt = Table([[Paragraph(f"<b>{k}</b>", s_body), Paragraph(v, s_body)] for k, v in meta],
               colWidths=[cw*0.25, cw*0.75])
    mt.setStyle(TableStyle([
        ("VALIGN",    (0,0), (-1,-1), "TOP"),
        ("LINEBELOW", (0,0), (-1,-1), 0.3, lgrey_c),
    ]))
    story.append(mt)
    story.append(Spacer(1, 10))

    # ── Score banner ────────────────────────────────────────────────────────
    risk_tbl = Table([[
        Paragraph(f"<b>{doc.risk_level.title()} Risk</b>", sty("rk", fontSize=14, textColor=rc, fontName="Helvetica-Bold")),
        Paragraph(f"{len(doc.violations)} violation(s) against {escape(doc.primary_regulation)}", sty("rr", fontSize=9, leading=13, textColor=dark_c)),
        Paragraph(f"<b>{doc.compliance_score}/100</b>", sty("rs", fontSize=14, textColor=rc, fontName="Helvetica-Bold", alignment=2)),
    ]], colWidths=[cw*0.25, cw*0.5, cw*0.25])
    risk_tbl.setStyle(TableStyle([
        ("BOX",           (0,0), (-1,-1), 1.5, rc),
        ("VALIGN",        (0,0), (-1,-1), "MIDDLE"),
        ("LEFTPADDING",   (0,0), (-1,-1), 10),
        ("RIGHTPADDING",  (0,0), (-1,-1), 10),
        ("TOPPADDING",    (0,0), (-1,-1), 10),
        ("BOTTOMPADDING", (0,0), (-1,-1), 10),
    ]))
    story.append(KeepTogether([risk_tbl]))
    story.append(Spacer(1, 14))

    # ── Violations ──────────────────────────────────────────────────────────
    story.append(Paragraph("Violations", s_h2))
    story.append(HRFlowable(width="100%", thickness=0.5, color=lgrey_c, spaceAfter=8))

    if doc.violations:
        for i, v in enumerate(doc.violations, 1):
            sc = rgb(RISK_COLOR.get(v.severity, GREY))
            cell = [
                Paragraph(f"<font color='#888' size='7'>{escape(v.regulation.upper())}</font>", s_small),
                Paragraph(f"<b>{escape(v.issue)}</b>", sty(f"vi{i}", fontSize=9, leading=13, fontName="Helvetica-Bold")),
                Paragraph(f"Clause: {escape(v.clause)}", s_small),
            ]
            if v.suggestion:
                cell.append(Paragraph(f"<i>Fix: {escape(v.suggestion)}</i>", s_body))
            tbl = Table([[
                Paragraph(f"<b>{v.severity.upper()}</b>", sty(f"sv{i}", fontSize=8, textColor=sc, fontName="Helvetica-Bold")),
                cell,
            ]], colWidths=[22*mm, cw - 22*mm])
            tbl.setStyle(TableStyle([
                ("VALIGN",        (0,0), (-1,-1), "TOP"),
                ("BOX",           (0,0), (-1,-1), 0.75, lgrey_c),
                ("LEFTPADDING",   (0,0), (-1,-1), 8),
                ("RIGHTPADDING",  (0,0), (-1,-1), 8),
                ("TOPPADDING",    (0,0), (-1,-1), 6),
                ("BOTTOMPADDING", (0,0), (-1,-1), 6),
            ]))
            story.append(KeepTogether([tbl, Spacer(1, 5)]))
    else:
        story.append(Paragraph("No violations detected.", s_small))

    # ── Reviewer notes ──────────────────────────────────────────────────────
    if doc.lawyer_notes:
        story.append(Paragraph("Reviewer Notes", s_h2))
        story.append(HRFlowable(width="100%", thickness=0.5, color=lgrey_c, spaceAfter=8))
        story.append(Paragraph(escape(doc.lawyer_notes), s_body))

    # ── Footer ───────────────────────────────────────────────────────────────
    story.append(Spacer(1, 16))
    story.append(HRFlowable(width="100%", thickness=0.5, color=lgrey_c))
    story.append(Paragraph(
        "This report is an automated assessment and does not constitute legal advice. "
        "Findings should be confirmed by the assigned reviewer.",
        sty("foot", fontSize=7, leading=10, textColor=grey_c, spaceAfter=0)
    ))

    pdf.build(story)
    return buf.getvalue()


# ─────────────────────────────────────────────────────────────────────────────
# CSV export
# ─────────────────────────────────────────────────────────────────────────────

def export_csv(doc: ComplianceDocument) -> bytes:
    buf = io.StringIO()
    w = csv.writer(buf)

    # ── Summary ──────────────────────────────────────────────────────────────
    w.writerow(["SECTION", "FIELD", "VALUE"])
    w.writerow(["Summary", "Document",         doc.document_name])
    w.writerow(["Summary", "Document Type",    doc.document_type])
    w.writerow(["Summary", "Regulations",      _regs(doc)])
    w.writerow(["Summary", "Status",           doc.status])
    w.writerow(["Summary", "Compliance Score", doc.compliance_score])
    w.writerow(["Summary", "Risk Level",       doc.risk_level])
    w.writerow(["Summary", "Reviewed At",      _fmt_ts(doc.reviewed_at)])
    w.writerow(["Summary", "Lawyer Notes",     doc.lawyer_notes])
    w.writerow([])

    # ── Violations ───────────────────────────────────────────────────────────
    w.writerow(["VIOLATIONS"])
    w.writerow(["#", "Severity", "Regulation", "Clause", "Issue", "Suggestion"])
    for i, v in enumerate(doc.violations, 1):
        w.writerow([i, v.severity, v.regulation, v.clause, v.issue, v.suggestion])

    return buf.getvalue().encode("utf-8-sig")  # BOM for Excel compatibility
