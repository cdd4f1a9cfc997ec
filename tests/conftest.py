import pytest

from rquote import BindingEnvironment, Diagnostics, Name, parse


@pytest.fixture
def env():
    """A fresh binding environment with one binding of each kind."""
    e = BindingEnvironment()
    e.bind_value("n", 10)
    e.bind_expression("expr", parse("g(y)"))
    e.bind_dots([(None, Name("a")), ("b", parse("2"))])
    return e


@pytest.fixture
def diagnostics():
    return Diagnostics()


@pytest.fixture
def write_csv_body():
    """Shaped like the body of R's write.csv: several assignments, one through `names<-`."""
    return parse(
        """{
        Call <- match.call(expand.dots = TRUE)
        for (argname in c("append", "col.names", "sep")) if (!is.null(Call[[argname]])) warning("ignored")
        rn <- eval.parent(Call$row.names)
        Call$append <- NULL
        names(Call) <- "x"
        Call[[1L]] <- quote(utils::write.table)
        eval.parent(Call)
    }"""
    )
