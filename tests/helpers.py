import os

from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, YamlConfigSettingsSource

from framelink.bootstrap.config.settings import FrameLinkConfig


class FakeFrameLinkConfig(FrameLinkConfig, BaseSettings):
    """
    FrameLinkConfig that never looks at the command line: values come from
    init kwargs and, when TEST_FRAMELINKCONFIG is set, from that YAML file.
    """
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: tuple[PydanticBaseSettingsSource, ...] = (init_settings,)
        if "TEST_FRAMELINKCONFIG" in os.environ:
            sources += (YamlConfigSettingsSource(settings_cls, yaml_file=os.environ["TEST_FRAMELINKCONFIG"]),)
        return sources
