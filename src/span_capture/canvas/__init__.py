from span_capture.canvas.convert import (
    convert_canvas,
    convert_canvas_file,
    convert_directory,
    convert_pv,
)

__all__ = ["convert_canvas", "convert_canvas_file", "convert_directory", "convert_pv"]
