"""oslo.config options for hosts that configure sources through oslo.

Register the options on the host's ``ConfigOpts`` and build the source
configuration from them::

    register_opts(CONF)
    source = ParspackIPRange(config_from_conf(CONF))
"""

from oslo_config import cfg

from .config import DEFAULT_URL, RefreshConfig, parse_duration

GROUP = "parspack"

parspack_opts = [
    cfg.StrOpt('url',
               default=DEFAULT_URL,
               help='Endpoint serving the ParsPack CDN ranges, one CIDR '
                    'expression per line.'),
    cfg.StrOpt('interval',
               default='1h',
               help='How often to refresh the range list. Accepts duration '
                    'strings such as "30m" or "2h", or plain seconds.'),
    cfg.StrOpt('timeout',
               default='0',
               help='Maximum time for a single fetch. "0" disables the '
                    'timeout.'),
]


def register_opts(conf, group=GROUP):
    """Register the ParsPack options under ``group`` on ``conf``."""
    conf.register_opts(parspack_opts, group=group)


def list_opts():
    """Entry point for ``oslo-config-generator``."""
    return [(GROUP, parspack_opts)]


def config_from_conf(conf, group=GROUP):
    """Build a :class:`RefreshConfig` from registered options.

    Raises ConfigError when a duration cannot be parsed.
    """
    section = conf[group]
    return RefreshConfig(
        url=section.url,
        interval=parse_duration(section.interval),
        timeout=parse_duration(section.timeout),
    )
