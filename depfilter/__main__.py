from depfilter.cli import app


app(prog_name="dfilter")
