"""
CLI entry points for product label preview and printing.
"""

# Standard Library
import argparse
import pathlib
import sys
import time

# local repo modules
import pos_label_engine as ple
import pos_label_engine.config
import pos_label_engine.errors
import pos_label_engine.print_export
import pos_label_engine.products
import pos_label_engine.render
import pos_label_engine.template


EngineConfig = ple.config.EngineConfig
PrintJob = ple.template.PrintJob
LabelEngineError = ple.errors.LabelEngineError

DEFAULT_TEMPLATE_ID = "standard-80x40"


#============================================
def build_engine_config(args: argparse.Namespace) -> EngineConfig:
	"""
	Build engine config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		EngineConfig.
	"""
	return EngineConfig(
		dpi=args.dpi,
		canvas_width=args.canvas_width,
		padding=args.padding,
		currency_symbol=args.currency_symbol,
		print_scale=args.scale,
	)


#============================================
def build_print_job(args: argparse.Namespace, products: list) -> PrintJob:
	"""
	Build the print job from CLI args.

	Args:
		args: Parsed argparse namespace.
		products: Products after search and category filtering.

	Returns:
		PrintJob selecting the requested ids, or every product when none given.
	"""
	if args.select:
		selected = frozenset(args.select)
	else:
		selected = frozenset(product.id for product in products)
	return PrintJob(
		selected_product_ids=selected,
		template_id=args.template_id,
		copies_per_product=args.copies,
		custom_text=args.custom_text,
	)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Optional argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Preview and print product labels.")

	input_group = parser.add_argument_group("Input")
	input_group.add_argument("-p", "--products", dest="products_path", default=None, help="Products JSON file.")
	input_group.add_argument("-t", "--template", dest="template_id", default=DEFAULT_TEMPLATE_ID, help="Template id.")
	input_group.add_argument("-T", "--templates", dest="templates_path", default=None, help="Extra template catalog JSON.")
	input_group.add_argument("-l", "--list-templates", dest="list_templates", action="store_true", help="List templates and exit.")

	select_group = parser.add_argument_group("Selection")
	select_group.add_argument("-s", "--select", dest="select", type=int, nargs="+", default=None, help="Product ids to print.")
	select_group.add_argument("--search", dest="search", default="", help="Filter by name, SKU or barcode.")
	select_group.add_argument("--category", dest="category", default=None, help="Filter by category name.")
	select_group.add_argument("-c", "--copies", dest="copies", type=int, default=1, help="Copies per product.")
	select_group.add_argument("-x", "--custom-text", dest="custom_text", default="", help="Extra text on every label.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Output .png preview or .pdf print document.")
	output_group.add_argument("--html", dest="html_path", default=None, help="Also write the HTML print page.")
	output_group.add_argument("--send", dest="send", action="store_true", help="Send the print document to the printer.")
	output_group.add_argument("--printer", dest="printer", default=None, help="Destination printer name.")

	layout_group = parser.add_argument_group("Layout")
	layout_group.add_argument("--scale", dest="scale", type=float, default=ple.config.DEFAULT_PRINT_SCALE, help="Print scale factor.")
	layout_group.add_argument("--dpi", dest="dpi", type=float, default=ple.config.DEFAULT_DPI, help="Screen DPI for mm conversion.")
	layout_group.add_argument("--canvas-width", dest="canvas_width", type=float, default=ple.config.PREVIEW_CANVAS_WIDTH, help="Sheet width in pixels.")
	layout_group.add_argument("--padding", dest="padding", type=float, default=ple.config.DEFAULT_PADDING, help="Gap between labels in pixels.")
	layout_group.add_argument("--currency-symbol", dest="currency_symbol", default=ple.config.DEFAULT_CURRENCY_SYMBOL, help="Currency symbol.")

	args = parser.parse_args(argv)
	if not args.list_templates:
		if args.products_path is None:
			parser.error("--products is required")
		if args.output_path is None and not args.send:
			parser.error("--output or --send is required")
	return args


#============================================
def print_template_list(catalog: list) -> None:
	"""
	Print the template catalog.

	Args:
		catalog: Loaded templates.
	"""
	for template in catalog:
		print(f"{template.id}\t{template.width:g}x{template.height:g}mm\t{template.name}")


#============================================
def print_stats(stats: ple.render.RenderStats) -> None:
	"""
	Print warning summaries for a render.

	Args:
		stats: Render counters.
	"""
	for message in stats.fallback_messages:
		print(message)
	if stats.barcode_fallbacks > 0:
		print(f"Barcode fallback summary: {stats.barcode_fallbacks} labels")
	if stats.overflow_elements > 0:
		print(f"Element overflow summary: {stats.overflow_elements} elements outside the label")


#============================================
def run_pipeline(args: argparse.Namespace) -> None:
	"""
	Run selection, rendering and output.

	Args:
		args: Parsed argparse namespace.
	"""
	templates_path = pathlib.Path(args.templates_path) if args.templates_path else None
	catalog = ple.template.load_template_catalog(templates_path)
	if args.list_templates:
		print_template_list(catalog)
		return

	config = build_engine_config(args)
	template = ple.template.find_template(catalog, args.template_id)
	print(f"Template: {template.name} ({template.width:g}x{template.height:g}mm)")

	start_time = time.perf_counter()
	products = ple.products.load_products(pathlib.Path(args.products_path))
	products = ple.products.filter_products(products, args.search, args.category)
	job = build_print_job(args, products)
	print(f"Products loaded: {len(products)}")
	print(f"Copies per product: {job.copies_per_product}")
	if job.custom_text:
		print(f"Custom text: {job.custom_text}")

	output_path = pathlib.Path(args.output_path) if args.output_path else None
	render_start = time.perf_counter()
	if output_path is not None and output_path.suffix.lower() == ".png" and not args.send:
		result = ple.render.render_preview(products, template, job, config)
		result.image.save(output_path)
		render_end = time.perf_counter()
		print(f"Labels rendered: {result.label_count}")
		print_stats(result.stats)
		print(f"Preview written: {output_path}")
	else:
		document = ple.print_export.render_for_print(job, products, template, config=config)
		render_end = time.perf_counter()
		print(f"Labels rendered: {document.label_count}")
		print(f"Pages: {document.page_count}")
		print_stats(document.stats)
		if output_path is not None:
			output_path.write_bytes(document.pdf_bytes)
			print(f"Print document written: {output_path}")
		if args.html_path:
			pathlib.Path(args.html_path).write_text(document.html, encoding="utf-8")
			print(f"Print page written: {args.html_path}")
		if args.send:
			spooler_output = ple.print_export.send_to_printer(document, args.printer)
			print(f"Sent to printer: {spooler_output or 'ok'}")

	total_time = time.perf_counter() - start_time
	print(
		"Timing: render={:.2f}s total={:.2f}s".format(
			render_end - render_start,
			total_time,
		)
	)


#============================================
def main(argv: list[str] | None = None) -> int:
	"""
	Main entry point.

	Args:
		argv: Optional argument list.

	Returns:
		Process exit status.
	"""
	args = parse_args(argv)
	try:
		run_pipeline(args)
	except LabelEngineError as error:
		print(f"Error: {error}", file=sys.stderr)
		return 1
	return 0
