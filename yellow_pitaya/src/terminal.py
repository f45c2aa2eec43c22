"""Terminal utility for colored output."""


class ColorPrinter:
    """
    Utility for printing colored text to the terminal using ANSI escape codes.
    """

    # ANSI Color Codes
    HEADER = "\033[95m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    RESET = "\033[0m"
    BOLD = "\033[1m"

    @staticmethod
    def _emit(color, tag, message):
        print(f"{color}[{tag}] {message}{ColorPrinter.RESET}")

    @staticmethod
    def info(message):
        ColorPrinter._emit(ColorPrinter.BLUE, "INFO", message)

    @staticmethod
    def success(message):
        ColorPrinter._emit(ColorPrinter.GREEN, "OK", message)

    @staticmethod
    def warning(message):
        ColorPrinter._emit(ColorPrinter.YELLOW, "WARNING", message)

    @staticmethod
    def error(message):
        ColorPrinter._emit(ColorPrinter.RED, "ERROR", message)

    @staticmethod
    def header(message):
        """Print a bold banner."""
        print(f"\n{ColorPrinter.HEADER}{ColorPrinter.BOLD}{'=' * 60}")
        print(f"   {message.upper()}")
        print(f"{'=' * 60}{ColorPrinter.RESET}\n")

    @staticmethod
    def cyan(message):
        print(f"{ColorPrinter.CYAN}{message}{ColorPrinter.RESET}")

    @staticmethod
    def readings(values):
        """Print ``name: value`` pairs aligned on the colon."""
        if not values:
            return
        width = max(len(str(name)) for name in values)
        for name, value in values.items():
            shown = "?" if value is None else value
            print(f"  {ColorPrinter.CYAN}{str(name).ljust(width)}{ColorPrinter.RESET} : {shown}")
