from exam_portal.widgets.file_upload import DragEvent, FileUpload, PickedFile

MB = 1024 * 1024


def make_widget(max_size=2):
    selected = []
    widget = FileUpload(on_file_select=selected.append, accept=".pdf,.txt", max_size=max_size)
    return widget, selected


def test_oversize_file_is_rejected():
    widget, selected = make_widget(max_size=2)

    widget.handle_file_select([PickedFile("huge.pdf", 2 * MB + 1)])

    assert widget.selected_file is None
    assert "2MB" in widget.error
    assert selected == []


def test_file_at_the_limit_is_accepted():
    widget, selected = make_widget(max_size=2)
    file = PickedFile("exact.pdf", 2 * MB)

    widget.handle_file_select([file])

    assert widget.selected_file is file
    assert selected == [file]


def test_valid_file_clears_previous_error():
    widget, selected = make_widget()
    widget.handle_file_select([PickedFile("huge.pdf", 10 * MB)])
    assert widget.error is not None

    ok = PickedFile("notes.pdf", 100)
    widget.handle_file_select([ok])

    assert widget.error is None
    assert widget.selected_file is ok
    assert selected == [ok]


def test_drop_adopts_first_file_and_prevents_default():
    widget, selected = make_widget()
    first, second = PickedFile("a.txt", 10), PickedFile("b.txt", 10)
    event = DragEvent(files=[first, second])

    widget.handle_drop(event)

    assert event.default_prevented
    assert selected == [first]


def test_drop_without_files_is_ignored():
    widget, selected = make_widget()
    widget.handle_drop(DragEvent())
    assert widget.selected_file is None
    assert selected == []


def test_drag_over_prevents_default():
    widget, _ = make_widget()
    event = DragEvent()
    widget.handle_drag_over(event)
    assert event.default_prevented


def test_remove_resets_selection_error_and_input():
    widget, _ = make_widget()
    widget.handle_file_select([PickedFile("notes.pdf", 100)])
    widget.error = "stale"

    widget.handle_remove_file()

    assert widget.selected_file is None
    assert widget.error is None
    assert widget.file_input.value == ""
    assert widget.view()["state"] == "empty"


def test_view_describes_state():
    widget, _ = make_widget(max_size=5)
    assert widget.view()["hint"] == "Max file size: 5MB"
    assert widget.view()["accept"] == ".pdf,.txt"

    widget.handle_file_select([PickedFile("notes.pdf", 100)])
    assert widget.view() == {"state": "selected", "filename": "notes.pdf", "error": None}
