"""
Document generation for printable regulatory forms.

Documents are produced as self-contained byte buffers (HTML or PDF); the
routes decide how to hand them to the browser.
"""
from datetime import datetime
from io import BytesIO

from flask import Response, current_app, flash, render_template, send_file


def render_document(template_name, /, **context):
    """Render a print template to UTF-8 HTML bytes."""
    context.setdefault('generated_at', datetime.now())
    context.setdefault('auto_print', True)
    return render_template(template_name, **context).encode('utf-8')


def render_pdf(template_name, /, **context):
    """Render a print template to PDF bytes (requires WeasyPrint)."""
    from weasyprint import HTML

    context['auto_print'] = False
    html = render_document(template_name, **context).decode('utf-8')
    return HTML(string=html).write_pdf()


def document_response(template_name, filename, /, fmt='html', **context):
    """
    HTML inline, or a PDF attachment when ``fmt == 'pdf'``.

    Returns None when the PDF engine is not available so the caller can fall
    back to its list screen.
    """
    if fmt == 'pdf':
        try:
            pdf = render_pdf(template_name, **context)
        except (ImportError, OSError):
            current_app.logger.exception('PDF rendering unavailable')
            flash('PDF printing requires the WeasyPrint package', 'danger')
            return None
        return send_file(BytesIO(pdf), as_attachment=True, download_name=f'{filename}.pdf',
                         mimetype='application/pdf')
    return Response(render_document(template_name, **context), mimetype='text/html')
