from django.contrib import admin

from .models import Network, Site, SiteOption


class SiteOptionInline(admin.TabularInline):
    model = SiteOption
    extra = 0


@admin.register(Network)
class NetworkAdmin(admin.ModelAdmin):
    list_display = ('domain', 'path', 'is_subdomain_install', 'created_at')
    readonly_fields = ('created_at', 'updated_at')


@admin.register(Site)
class SiteAdmin(admin.ModelAdmin):
    list_display = ('id', 'domain', 'path', 'network', 'created_at')
    list_filter = ('network',)
    search_fields = ('domain', 'path')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [SiteOptionInline]

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        from .middleware import SiteMiddleware
        SiteMiddleware.clear_cache()


@admin.register(SiteOption)
class SiteOptionAdmin(admin.ModelAdmin):
    list_display = ('site', 'name', 'value')
    list_filter = ('name',)
    search_fields = ('site__domain', 'name')
