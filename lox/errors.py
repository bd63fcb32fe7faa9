import sys


class LoxRuntimeError(RuntimeError):
    def __init__(self, token, message):
        super().__init__(message)
        self.token = token
        self.message = message


class Reporter:
    """Collects diagnostics from every stage of the pipeline.

    Scan, parse and resolve errors are reported as they are found and only set
    `had_error`; the driver checks the flag before moving to the next stage.
    Runtime errors set `had_runtime_error`.
    """

    def __init__(self, stream=None):
        self.stream = stream
        self.had_error = False
        self.had_runtime_error = False

    def error(self, line, message):
        self.report(line, "", message)

    def token_error(self, token, message):
        if token.type == "EOF":
            self.report(token.line, " at end", message)
        else:
            self.report(token.line, f" at '{token.lexeme}'", message)

    def runtime_error(self, error):
        print(f"{error.message}\n[line {error.token.line}]", file=self.output)
        self.had_runtime_error = True

    def report(self, line, where, message):
        print(f"[line {line}] Error{where}: {message}", file=self.output)
        self.had_error = True

    def reset(self):
        self.had_error = False
        self.had_runtime_error = False

    @property
    def output(self):
        return self.stream if self.stream is not None else sys.stderr
