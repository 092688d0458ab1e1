pytest_plugins = ["span_capture.pytest_plugin"]
