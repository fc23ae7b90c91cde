"""
Grid packing of label instances onto a fixed-width sheet.
"""

# Standard Library
import dataclasses
import math

# local repo modules
import pos_label_engine as ple
import pos_label_engine.products


Product = ple.products.Product


@dataclasses.dataclass(frozen=True)
class GridCell:
	row: int
	col: int
	x: float
	y: float


@dataclasses.dataclass(frozen=True)
class LabelCell:
	row: int
	col: int
	x: float
	y: float
	product: Product
	copy_index: int


@dataclasses.dataclass(frozen=True)
class GridLayout:
	instance_count: int
	columns: int
	rows: int
	label_width: float
	label_height: float
	padding: float
	canvas_width: float
	canvas_height: float

	def cell_of(self, index: int) -> GridCell:
		"""
		Compute the cell origin for an instance index.

		Args:
			index: Instance index in 0..instance_count-1.

		Returns:
			GridCell with the top-left pixel origin.
		"""
		if index < 0 or index >= self.instance_count:
			raise IndexError(f"instance index {index} outside 0..{self.instance_count - 1}")
		row = index // self.columns
		col = index % self.columns
		x = col * (self.label_width + self.padding) + self.padding
		y = row * (self.label_height + self.padding) + self.padding
		return GridCell(row=row, col=col, x=x, y=y)


#============================================
def expand_instances(
	products: list[Product],
	copies_per_product: int,
) -> list[tuple[Product, int]]:
	"""
	Expand products into (product, copy_index) instances.

	Args:
		products: Selected products in selection order.
		copies_per_product: Copies for every product.

	Returns:
		Instances in product-major, copy-minor order.
	"""
	instances: list[tuple[Product, int]] = []
	for product in products:
		for copy_index in range(copies_per_product):
			instances.append((product, copy_index))
	return instances


#============================================
def compute_columns(label_width: float, canvas_width: float, padding: float) -> int:
	"""
	Compute how many labels fit across the canvas.

	Args:
		label_width: Label width in pixels.
		canvas_width: Canvas width in pixels.
		padding: Gap between labels and around the sheet edge.

	Returns:
		Column count, at least 1.
	"""
	step = label_width + padding
	if step <= 0:
		return 1
	columns = math.floor((canvas_width - padding) / step)
	return max(1, columns)


#============================================
def pack_grid(
	instance_count: int,
	label_width: float,
	label_height: float,
	canvas_width: float,
	padding: float,
	min_canvas_height: float = 0.0,
) -> GridLayout:
	"""
	Compute grid geometry for a number of label instances.

	Args:
		instance_count: Number of (product, copy) instances.
		label_width: Label width in pixels.
		label_height: Label height in pixels.
		canvas_width: Fixed canvas width in pixels.
		padding: Gap between labels and around the sheet edge.
		min_canvas_height: Lower bound for the canvas height.

	Returns:
		GridLayout.
	"""
	columns = compute_columns(label_width, canvas_width, padding)
	rows = math.ceil(instance_count / columns) if instance_count > 0 else 0
	canvas_height = max(min_canvas_height, rows * (label_height + padding) + padding)
	return GridLayout(
		instance_count=instance_count,
		columns=columns,
		rows=rows,
		label_width=label_width,
		label_height=label_height,
		padding=padding,
		canvas_width=canvas_width,
		canvas_height=canvas_height,
	)


#============================================
def build_cells(
	layout: GridLayout,
	instances: list[tuple[Product, int]],
) -> list[LabelCell]:
	"""
	Assign every instance to its grid cell.

	Args:
		layout: Grid layout from pack_grid.
		instances: Instances from expand_instances.

	Returns:
		LabelCell list in instance order.
	"""
	cells: list[LabelCell] = []
	for index, (product, copy_index) in enumerate(instances):
		cell = layout.cell_of(index)
		cells.append(
			LabelCell(
				row=cell.row,
				col=cell.col,
				x=cell.x,
				y=cell.y,
				product=product,
				copy_index=copy_index,
			)
		)
	return cells
