"""
Print-resolution rendering and printable document output.
"""

# Standard Library
import base64
import dataclasses
import io
import os
import shutil
import subprocess
import tempfile

# PIP3 modules
import PIL.Image
import reportlab.lib.pagesizes
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import pos_label_engine as ple
import pos_label_engine.config
import pos_label_engine.errors
import pos_label_engine.render
import pos_label_engine.template


EngineConfig = ple.config.EngineConfig
PrintUnavailable = ple.errors.PrintUnavailable
RenderStats = ple.render.RenderStats
LabelTemplate = ple.template.LabelTemplate
PrintJob = ple.template.PrintJob

PAGE_SIZE = reportlab.lib.pagesizes.A4
PRINT_TITLE = "Print Labels"
PRINT_COMMANDS = (
	("lp", "-d"),
	("lpr", "-P"),
)


@dataclasses.dataclass
class PrintDocument:
	image: PIL.Image.Image
	pdf_bytes: bytes
	html: str
	stats: RenderStats
	label_count: int
	page_count: int
	scale_factor: float


#============================================
def allocate_print_surface(width: float, height: float, config: EngineConfig) -> PIL.Image.Image:
	"""
	Allocate the print sheet, refusing sizes the platform cannot hold.

	Args:
		width: Width in pixels.
		height: Height in pixels.
		config: Engine configuration.

	Returns:
		RGB image.
	"""
	pixels = int(round(width)) * int(round(height))
	if pixels > config.max_surface_pixels:
		raise PrintUnavailable(
			f"print surface {int(round(width))}x{int(round(height))} exceeds {config.max_surface_pixels} pixels"
		)
	try:
		return ple.render.create_surface(width, height)
	except (ValueError, MemoryError) as error:
		raise PrintUnavailable(f"cannot create print surface: {error}") from error


#============================================
def slice_for_pages(image: PIL.Image.Image, strip_height: int) -> list[PIL.Image.Image]:
	"""
	Cut a tall sheet into page-height strips.

	Args:
		image: Sheet image.
		strip_height: Strip height in pixels.

	Returns:
		Strips top to bottom.
	"""
	strip_height = max(1, strip_height)
	strips: list[PIL.Image.Image] = []
	for top in range(0, image.height, strip_height):
		bottom = min(image.height, top + strip_height)
		strips.append(image.crop((0, top, image.width, bottom)))
	return strips


#============================================
def build_print_pdf(image: PIL.Image.Image, margin: float) -> tuple[bytes, int]:
	"""
	Place a sheet raster on A4 pages at full printable width.

	Args:
		image: Sheet image.
		margin: Page margin in points.

	Returns:
		Tuple of (pdf bytes, page count).
	"""
	page_width, page_height = PAGE_SIZE
	printable_width = page_width - 2.0 * margin
	printable_height = page_height - 2.0 * margin
	points_per_pixel = printable_width / image.width
	strip_height = int(printable_height / points_per_pixel)
	strips = slice_for_pages(image, strip_height)

	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=PAGE_SIZE)
	pdf.setTitle(PRINT_TITLE)
	for strip in strips:
		draw_height = strip.height * points_per_pixel
		pdf.drawImage(
			reportlab.lib.utils.ImageReader(strip),
			margin,
			page_height - margin - draw_height,
			width=printable_width,
			height=draw_height,
			mask=None,
			preserveAspectRatio=False,
			anchor="sw",
		)
		pdf.showPage()
	pdf.save()
	return (buffer.getvalue(), len(strips))


#============================================
def build_print_html(image: PIL.Image.Image) -> str:
	"""
	Build a print page that shows the sheet and opens the print dialog.

	Args:
		image: Sheet image.

	Returns:
		HTML document with the raster embedded as a PNG data URL.
	"""
	buffer = io.BytesIO()
	image.save(buffer, format="PNG")
	encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
	return (
		"<!DOCTYPE html>\n"
		"<html>\n"
		"<head>\n"
		f"<title>{PRINT_TITLE}</title>\n"
		"<style>\n"
		"@page { margin: 0; size: A4; }\n"
		"body { margin: 0; padding: 20px; }\n"
		"img { width: 100%; height: auto; }\n"
		"@media print { body { padding: 0; } }\n"
		"</style>\n"
		"</head>\n"
		"<body>\n"
		f"<img src=\"data:image/png;base64,{encoded}\" alt=\"labels\">\n"
		"<script>window.onload = function() { setTimeout(function() { window.print(); }, 100); };</script>\n"
		"</body>\n"
		"</html>\n"
	)


#============================================
def render_for_print(
	job: PrintJob,
	products: list,
	template: LabelTemplate,
	scale_factor: float | None = None,
	config: EngineConfig | None = None,
) -> PrintDocument:
	"""
	Render the label sheet at print resolution and wrap it for printing.

	Args:
		job: Print job.
		products: Product source; only selected ids are used.
		template: Label template.
		scale_factor: Pixel multiplier over the preview, default from config.
		config: Engine configuration.

	Returns:
		PrintDocument.
	"""
	if config is None:
		config = EngineConfig()
	if scale_factor is None:
		scale_factor = config.print_scale
	if scale_factor <= 0:
		raise ple.errors.ValidationError("scale_factor", f"must be > 0, got {scale_factor}")
	layout, cells = ple.render.plan_sheet(products, template, job, config, scale_factor)
	if not cells:
		raise PrintUnavailable("No products selected")

	surface = allocate_print_surface(layout.canvas_width, layout.canvas_height, config)
	stats = ple.render.render_cells(surface, cells, template, job.custom_text, config, scale_factor)
	pdf_bytes, page_count = build_print_pdf(surface, config.print_page_margin)
	html = build_print_html(surface)
	return PrintDocument(
		image=surface,
		pdf_bytes=pdf_bytes,
		html=html,
		stats=stats,
		label_count=len(cells),
		page_count=page_count,
		scale_factor=scale_factor,
	)


#============================================
def send_to_printer(document: PrintDocument, printer: str | None = None) -> str:
	"""
	Hand the PDF to the system print spooler.

	Args:
		document: Rendered print document.
		printer: Optional destination printer name.

	Returns:
		Spooler output, usually the job id line.
	"""
	handle = tempfile.NamedTemporaryFile(suffix=".pdf", delete=False)
	try:
		with handle:
			handle.write(document.pdf_bytes)
		for command, printer_flag in PRINT_COMMANDS:
			executable = shutil.which(command)
			if executable is None:
				continue
			args = [executable]
			if printer:
				args.extend([printer_flag, printer])
			args.append(handle.name)
			result = subprocess.run(args, capture_output=True, text=True, check=False)
			if result.returncode != 0:
				message = result.stderr.strip() or f"{command} exited with status {result.returncode}"
				raise PrintUnavailable(message)
			return result.stdout.strip()
		raise PrintUnavailable("no print spooler found (lp or lpr)")
	finally:
		os.unlink(handle.name)
