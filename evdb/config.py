import json
import logging
import os

from evdb.lib.python_utilities import str2bool

"""
Configuration file handling.  A config file is a JSON (or YAML, if
pyyaml is installed) dict of sections, each section a dict of
settings.  Connection settings are prefixed with ``evdb_``:

    {
        "default": {"evdb_app_key": "...", "evdb_user": "alice", "evdb_pass": "..."},
        "work": {"inherits": "default", "evdb_user": "bob"}
    }
"""

log = logging.getLogger("evdb")

## Keys accepted by EVDBClient.__init__ (and by login)
CONNKEYS = set(
    (
        "url",
        "app_key",
        "username",
        "password",
        "timeout",
        "headers",
        "huge_tree",
        "proxy",
        "ssl_verify_cert",
        "dump_communication",
    )
)


def config_section(config, section="default"):
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    return ret


def read_config(fn, interactive_error=False):
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config/"
        for config_file in (
            f"{cfgdir}/evdb/evdb.conf",
            f"{cfgdir}/evdb/evdb.yaml",
            f"{cfgdir}/evdb/evdb.json",
            f"{cfgdir}/evdb.conf",
            "/etc/evdb.conf",
            "/etc/evdb/evdb.conf",
        ):
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return None

    try:
        try:
            with open(fn, "rb") as config_file:
                return json.load(config_file)
        except json.decoder.JSONDecodeError:
            ## Late import, wrapped in try/except.  yaml is external module,
            ## and not included in the requirements as for now.
            try:
                import yaml

                try:
                    with open(fn, "rb") as config_file:
                        return yaml.load(config_file, yaml.SafeLoader)
                except yaml.YAMLError:
                    log.error(
                        f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
                    )
            except ImportError:
                log.error(
                    f"config file {fn} exists but is not valid json, and pyyaml is not installed."
                )

    except FileNotFoundError:
        log.info("no config file found")
    except ValueError:
        if interactive_error:
            log.error(
                "error in config file.  Be aware that the interactive configuration will ignore and overwrite the current broken config file",
                exc_info=True,
            )
        else:
            log.error("error in config file.  It will be ignored", exc_info=True)
    return {}


def section_params(section):
    """Picks the ``evdb_``-prefixed settings out of a config section"""
    conn_params = {}
    for k in section:
        if k.startswith("evdb_") and section[k]:
            key = k[5:]
            if key == "pass":
                key = "password"
            if key == "user":
                key = "username"
            conn_params[key] = section[k]
    return conn_params


def environment_params():
    """
    Picks the connection parameters out of ``EVDB_``-prefixed
    environment variables.  ``EVDB_CONFIG_FILE``,
    ``EVDB_CONFIG_SECTION`` and the debug variables are not
    connection parameters.
    """
    conf = {}
    for conf_key in os.environ:
        if not conf_key.startswith("EVDB_"):
            continue
        key = conf_key[5:].lower()
        if key in CONNKEYS and key != "dump_communication":
            conf[key] = os.environ[conf_key]
    if "timeout" in conf:
        conf["timeout"] = float(conf["timeout"])
    if "huge_tree" in conf:
        conf["huge_tree"] = bool(str2bool(conf["huge_tree"]))
    if "ssl_verify_cert" in conf:
        ## anything not looking like a boolean is the path of a CA bundle
        verify = str2bool(conf["ssl_verify_cert"])
        if verify is not None:
            conf["ssl_verify_cert"] = verify
    return conf


def get_connection_params(
    check_config_file=True,
    config_file=None,
    config_section_name=None,
    environment=True,
    **config_data,
):
    """
    Finds connection parameters, looking at (in this order) the
    parameters given, the environment and the config file.  The first
    source delivering anything wins.  Returns None if nothing was found.
    """
    if config_data:
        return config_data

    if environment:
        conf = environment_params()
        if conf:
            return conf
        if not config_file:
            config_file = os.environ.get("EVDB_CONFIG_FILE")
        if not config_section_name:
            config_section_name = os.environ.get("EVDB_CONFIG_SECTION")

    if check_config_file:
        cfg = read_config(config_file)
        if cfg:
            section = config_section(cfg, config_section_name or "default")
            conn_params = section_params(section)
            if conn_params:
                return conn_params
    return None
