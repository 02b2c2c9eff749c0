from django import forms

from .services import validate_site_slug


class AddSiteForm(forms.Form):
    """
    Форма Network » Sites » Add New Site.

    Поля рендерятся как blog[address], blog[title], ... — mapper читает
    намерение из blog[domain_map].
    """

    address = forms.CharField(
        max_length=63,
        label='Site Address (URL)',
        help_text='Only lowercase letters (a-z), numbers, and hyphens are allowed.',
    )
    title = forms.CharField(max_length=200, label='Site Title')
    email = forms.EmailField(required=False, label='Admin Email')
    domain_map = forms.BooleanField(
        required=False,
        label='Map this new site slug as a subdomain',
        widget=forms.CheckboxInput(attrs={'value': '1', 'id': 'domain-map'}),
    )

    def __init__(self, *args, allow_domain_map=True, **kwargs):
        super().__init__(*args, **kwargs)
        # Сеть на поддоменах — опцию не показываем
        if not allow_domain_map:
            del self.fields['domain_map']

    def add_prefix(self, field_name):
        return f'blog[{field_name}]'

    def clean_address(self):
        try:
            return validate_site_slug(self.cleaned_data['address'])
        except ValueError as e:
            raise forms.ValidationError(str(e))
