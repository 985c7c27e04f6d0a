# vexpand

`vexpand` expands shell-style variable references in text. It reads from a
text stream and writes to any object with a `write` method. It understands
`$NAME` and `${NAME}` and these parameter operators:

| Form | Meaning |
| --- | --- |
| `${VAR:-word}`, `${VAR-word}` | default value (`:` also treats empty as missing) |
| `${VAR:=word}`, `${VAR=word}` | default value, also passed to the `setenv` callback |
| `${VAR:+word}`, `${VAR+word}` | alternative value when set |
| `${VAR:?msg}`, `${VAR?msg}` | raise an error when missing |
| `${#VAR}` | length in characters |
| `${VAR#pat}`, `${VAR##pat}` | trim a prefix once / repeatedly |
| `${VAR%pat}`, `${VAR%%pat}` | trim a suffix once / repeatedly |
| `${VAR^}`, `${VAR^^}`, `${VAR,}`, `${VAR,,}` | upper-case first / all, lower-case first / all |
| `${VAR:off}`, `${VAR:off:len}` | substring by character offset; a negative offset counts from the end |
| `${VAR/pat/repl}`, `${VAR//pat/repl}` | replace the first / every occurrence |

Words may contain further references, e.g. `${N:-${FALLBACK}}`. Patterns are
literal strings, not globs. A `\$` writes a literal dollar sign unless
escapes are disabled. Unknown operators, an empty trim pattern, and
unterminated `${...` are written back unchanged.

## Expanding a stream

```python
import io
from vexpand.engine import Engine, Formatter, Options

env = {"NAME": "Ada"}
engine = Engine(
    label="example",
    opts=Options(),
    lookup=env.get,
    setenv=env.__setitem__,
    formatter=Formatter(),
)
out = io.StringIO()
engine.consume(io.StringIO("hello ${NAME}"), out)
print(out.getvalue())  # hello Ada
```

`lookup` takes a name and returns its value, or `None` when it is unset; it
defaults to `os.environ.get`. `setenv` is optional and is only called by the
`=` / `:=` operators.

`Options` fields:

- `error_unset`: raise `SubstError` for an unset variable.
- `keep_unset`: write unset references back in their literal form.
- `error_empty`: raise `EmptyError` when a substitution is empty.
- `no_ops`: do not interpret operators; `${VAR:-x}` is written back as is.
- `no_escape`: treat `\$` as an ordinary backslash followed by a reference.
- `backup_ext`: used by `Processor.process_in_place` (see below).

`Formatter(colored=True)` wraps substituted values and literals that are
written back in ANSI colour codes. `Formatter()` leaves them plain.

## Processing files

`vexpand.processor.Processor` holds options, a lookup, a setenv callback and
a formatter.

- `process_stream(label, reader, writer)` expands one stream and flushes the
  writer.
- `process_in_place(path)` rewrites a file through a temporary file in the
  same directory and renames it into place. It keeps the file's permissions
  and modification time. When `Options.backup_ext` is set, it leaves a copy
  of the original at `path + backup_ext`. This is a hard link where possible
  and a copy otherwise. The temporary file is removed if expansion fails.
- `vexpand.processor.copy_file(src, dst, mode)` copies a file, creating the
  destination with the given mode.

## Variable files

`vexpand.varsfile.read_vars(stream)` parses `KEY=VALUE` lines into a dict.
Blank lines and `#` comments are skipped. Keys and values are stripped, and
a value may itself contain `=`. A line without `=` raises `VarsFileError`.

`vexpand.varsfile.merge_vars(files, fallback)` reads several such files, with
later files winning. It returns a lookup that prefers those values and
otherwise calls `fallback`, which may be `None`. A parse error is re-raised
as `VarsFileError`, naming the file.

## Lower-level pieces

- `vexpand.tokens.Tokenizer` splits input into `Token`s, whose kinds are
  given by `TokType`.
- `vexpand.transform` has the string helpers behind the operators:
  `transform_case`, `substr`, `parse_offset_len`, `atoi_safe`,
  `trim_prefix_all` and `trim_suffix_all`.
- `vexpand.varref.VarRef` renders a name as `$NAME` or `${NAME}`; build one
  with `bare_ref` or `braced_ref`.

## Errors

- `vexpand.errors.SubstError` is raised for unset variables under
  `error_unset`, and for `${VAR?msg}`. In the second case the message reads
  `VAR: msg`.
- `vexpand.errors.EmptyError` is raised for empty results under
  `error_empty`.
- Errors from opening files are ordinary `OSError`s.

## What it does not do

`vexpand` is a library only. It installs no command-line program, so there
is nothing that takes files or options from a command line. Calling code
opens the streams, builds the `Options` and passes them in.