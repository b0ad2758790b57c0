import typer


def parse_param_pairs(pairs: list[str] | None) -> dict[str, str]:
    params: dict[str, str] = {}
    for pair in pairs or []:
        key, separator, value = pair.partition("=")
        if not separator or not key:
            raise typer.BadParameter(
                message=f"'{pair}' is not a valid parameter, expected key=value",
            )
        params[key] = value
    return params


def params_callback(ctx: typer.Context, value: list[str] | None):
    if ctx.resilient_parsing:
        return
    parse_param_pairs(value)
    return value
