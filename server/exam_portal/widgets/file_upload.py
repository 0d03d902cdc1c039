"""
Single-file picker with drag-and-drop and a client-side size ceiling.

The control is framework-neutral: a view layer forwards its input-change,
drop and drag-over events to the ``handle_*`` methods and draws whatever
``view()`` describes. It never touches the network.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

BYTES_PER_MB = 1024 * 1024


@dataclass
class PickedFile:
    """A file as the browser/file API reports it."""
    name: str
    size: int
    type: str = ""


@dataclass
class FileInput:
    """The hidden ``<input type=file>`` behind the control."""
    accept: Optional[str] = None
    value: str = ""
    files: Sequence[Any] = ()

    def reset(self) -> None:
        self.value = ""
        self.files = ()


@dataclass
class DragEvent:
    files: Sequence[Any] = ()
    default_prevented: bool = field(default=False, init=False)

    def prevent_default(self) -> None:
        self.default_prevented = True


class FileUpload:
    def __init__(
        self,
        on_file_select: Callable[[Any], None],
        accept: Optional[str] = None,
        max_size: int = 10,
    ):
        self.on_file_select = on_file_select
        self.accept = accept
        self.max_size = max_size  # MB
        self.selected_file: Optional[Any] = None
        self.error: Optional[str] = None
        self.file_input = FileInput(accept=accept)

    @property
    def max_bytes(self) -> int:
        return self.max_size * BYTES_PER_MB

    def handle_file_select(self, files: Sequence[Any]) -> None:
        """Change event of the file input; only the first file counts."""
        self.file_input.files = tuple(files)
        if not files:
            return
        file = files[0]
        self.file_input.value = getattr(file, "name", "")
        self._adopt(file)

    def handle_drop(self, event: DragEvent) -> None:
        event.prevent_default()
        if not event.files:
            return
        self._adopt(event.files[0])

    def handle_drag_over(self, event: DragEvent) -> None:
        event.prevent_default()

    def handle_remove_file(self) -> None:
        self.selected_file = None
        self.error = None
        self.file_input.reset()

    def _adopt(self, file: Any) -> bool:
        if file.size > self.max_bytes:
            self.error = f"File size must be less than {self.max_size}MB"
            return False
        self.selected_file = file
        self.error = None
        self.on_file_select(file)
        return True

    def view(self) -> dict:
        """What the control currently shows."""
        if self.selected_file is not None:
            return {
                "state": "selected",
                "filename": getattr(self.selected_file, "name", ""),
                "error": self.error,
            }
        return {
            "state": "empty",
            "prompt": "Upload a file or drag and drop",
            "hint": f"Max file size: {self.max_size}MB",
            "accept": self.accept,
            "error": self.error,
        }
