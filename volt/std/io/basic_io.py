import os
from volt.errors import VoltError


class BasicIO:
    def input(self, prompt: str) -> str:
        try:
            return input(prompt)
        except EOFError:
            # end of input reads as an empty line
            return ''

    def read_file(self, filename: str) -> str:
        try:
            with open(filename, 'r', encoding='utf-8') as f:
                return f.read()
        except (OSError, UnicodeDecodeError):
            raise VoltError('IOError', f"Could not open file: {filename}")

    def write_file(self, filename: str, data: str) -> bool:
        try:
            with open(filename, 'w', encoding='utf-8') as f:
                f.write(data)
            return True
        except OSError:
            raise VoltError('IOError', f"Could not open file for writing: {filename}")

    def append_file(self, filename: str, data: str) -> bool:
        try:
            with open(filename, 'a', encoding='utf-8') as f:
                f.write(data)
            return True
        except OSError:
            raise VoltError('IOError', f"Could not open file for appending: {filename}")

    def file_exists(self, filename: str) -> bool:
        return os.path.isfile(filename)
